"""
Email bodies for the contact form.

Plain functions that take a validated submission and return a fully
rendered subject, HTML body and plain-text body. User input is
HTML-escaped before it is interpolated.
"""
from dataclasses import dataclass
from enum import Enum
from html import escape
from typing import Optional

from imec_backend.schemas.contact import ContactSubmission

NO_MESSAGE_PLACEHOLDER = "No message provided"
BRAND_COLOR = "#1f3c88"


class Language(str, Enum):
    """Auto-reply languages."""

    EN = "en"
    AZ = "az"
    RU = "ru"


@dataclass(frozen=True)
class RenderedEmail:
    subject: str
    html: str
    text: str


@dataclass(frozen=True)
class AutoReplyCopy:
    """Static wording of the auto-reply in one language."""

    subject: str
    greeting: str  # {name}
    intro: str  # {interest}
    details_title: str
    details: tuple[tuple[str, str], ...]
    closing: str
    signature: str


AUTO_REPLY_COPY: dict[Language, AutoReplyCopy] = {
    Language.EN: AutoReplyCopy(
        subject="Thank you for contacting IMEC!",
        greeting="Dear {name},",
        intro=(
            "Thank you for your interest in {interest}. We have received your request "
            "and our team will contact you shortly."
        ),
        details_title="Useful information",
        details=(
            ("Schedule", "3 lessons a week, 90 minutes each"),
            ("Course duration", "3 months per level"),
            ("Price", "from 150 AZN per month"),
            ("Contact us", "info@imec-school.com"),
        ),
        closing="We look forward to seeing you at IMEC!",
        signature="Best regards,<br>The IMEC Team",
    ),
    Language.AZ: AutoReplyCopy(
        subject="IMEC ilə əlaqə saxladığınız üçün təşəkkür edirik!",
        greeting="Hörmətli {name},",
        intro=(
            "{interest} proqramına göstərdiyiniz marağa görə təşəkkür edirik. Müraciətinizi aldıq "
            "və komandamız tezliklə sizinlə əlaqə saxlayacaq."
        ),
        details_title="Faydalı məlumat",
        details=(
            ("Cədvəl", "həftədə 3 dərs, hər biri 90 dəqiqə"),
            ("Kursun müddəti", "hər səviyyə üçün 3 ay"),
            ("Qiymət", "ayda 150 AZN-dən"),
            ("Əlaqə", "info@imec-school.com"),
        ),
        closing="Sizi IMEC-də görməyə şadıq!",
        signature="Hörmətlə,<br>IMEC komandası",
    ),
    Language.RU: AutoReplyCopy(
        subject="Спасибо, что связались с IMEC!",
        greeting="Здравствуйте, {name}!",
        intro=(
            "Благодарим вас за интерес к программе «{interest}». Мы получили вашу заявку, "
            "и наша команда свяжется с вами в ближайшее время."
        ),
        details_title="Полезная информация",
        details=(
            ("Расписание", "3 занятия в неделю по 90 минут"),
            ("Продолжительность курса", "3 месяца на уровень"),
            ("Стоимость", "от 150 AZN в месяц"),
            ("Связь с нами", "info@imec-school.com"),
        ),
        closing="Будем рады видеть вас в IMEC!",
        signature="С уважением,<br>Команда IMEC",
    ),
}


def select_language(language: Optional[str]) -> Language:
    """Exact match on "az" or "ru"; anything else is English."""
    try:
        return Language(language)
    except ValueError:
        return Language.EN


def _field(value: Optional[str]) -> str:
    return (value or "").strip()


def _html_lines(value: str) -> str:
    """Escape text and turn newlines into <br> tags."""
    return "<br>".join(escape(line) for line in value.replace("\r\n", "\n").split("\n"))


def render_notification(submission: ContactSubmission) -> RenderedEmail:
    """Administrator notification with every submitted field."""
    name = _field(submission.name)
    message = _field(submission.message) or NO_MESSAGE_PLACEHOLDER
    rows = [
        ("Name", name),
        ("Email", _field(submission.email)),
        ("Phone", _field(submission.phone)),
        ("Interest", _field(submission.interest)),
    ]
    language = select_language(submission.language)

    html_rows = "".join(f"<p><strong>{label}:</strong> {escape(value)}</p>" for label, value in rows)
    html = (
        "<h3>New contact form submission from IMEC School</h3>"
        f"{html_rows}"
        f"<p><strong>Message:</strong><br>{_html_lines(message)}</p>"
        f"<p><strong>Language:</strong> {language.value}</p>"
    )

    text_rows = "\n".join(f"{label}: {value}" for label, value in rows)
    text = (
        "New contact form submission from IMEC School\n\n"
        f"{text_rows}\n"
        f"Message:\n{message}\n"
        f"Language: {language.value}\n"
    )

    # Header values cannot carry line breaks
    subject_name = " ".join(name.split())
    return RenderedEmail(subject=f"New Contact Form - {subject_name}", html=html, text=text)


def render_auto_reply(submission: ContactSubmission, language: Language) -> RenderedEmail:
    """Branded acknowledgement for the submitter in the given language."""
    copy = AUTO_REPLY_COPY[language]
    name = _field(submission.name)
    interest = _field(submission.interest)

    details_html = "".join(
        f'<tr><td style="padding:6px 12px;color:#555"><strong>{label}</strong></td>'
        f'<td style="padding:6px 12px">{value}</td></tr>'
        for label, value in copy.details
    )
    html = (
        f'<div data-lang="{language.value}" style="font-family:Arial,Helvetica,sans-serif;'
        'max-width:600px;margin:0 auto;color:#222">'
        f'<div style="background:{BRAND_COLOR};color:#fff;padding:20px;text-align:center">'
        '<h1 style="margin:0;font-size:24px">IMEC</h1></div>'
        '<div style="padding:24px">'
        f"<p>{copy.greeting.format(name=escape(name))}</p>"
        f"<p>{copy.intro.format(interest=escape(interest))}</p>"
        f'<h3 style="color:{BRAND_COLOR}">{copy.details_title}</h3>'
        f'<table style="border-collapse:collapse">{details_html}</table>'
        f"<p>{copy.closing}</p>"
        f"<p>{copy.signature}</p>"
        "</div></div>"
    )

    details_text = "\n".join(f"- {label}: {value}" for label, value in copy.details)
    text = (
        f"{copy.greeting.format(name=name)}\n\n"
        f"{copy.intro.format(interest=interest)}\n\n"
        f"{copy.details_title}:\n{details_text}\n\n"
        f"{copy.closing}\n\n"
        f"{copy.signature.replace('<br>', chr(10))}\n"
    )

    return RenderedEmail(subject=copy.subject, html=html, text=text)
