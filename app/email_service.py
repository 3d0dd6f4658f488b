"""
Email Service using SMTP
Sends appointment confirmation and status update emails to patients
"""

import logging
import smtplib
import ssl
import threading
from dataclasses import dataclass
from datetime import date
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from app.config import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MailerConfig:
    host: str
    port: int
    username: str
    password: str
    use_tls: bool
    from_address: str

    @property
    def enabled(self) -> bool:
        return bool(self.host)


_mailer: MailerConfig | None = None
_mailer_lock = threading.Lock()


def init_mailer() -> MailerConfig:
    """Load SMTP settings once for the whole process."""
    global _mailer
    with _mailer_lock:
        if _mailer is None:
            _mailer = MailerConfig(
                host=settings.smtp_host,
                port=settings.smtp_port,
                username=settings.smtp_user,
                password=settings.smtp_password,
                use_tls=settings.smtp_use_tls,
                from_address=settings.email_from,
            )
            if _mailer.enabled:
                logger.info(f"✅ Mailer configured for {_mailer.host}:{_mailer.port}")
            else:
                logger.warning("⚠️ SMTP host not set - emails will be skipped")
        return _mailer


def ensure_mailer() -> MailerConfig:
    """Return the mailer config, initialising it on first use."""
    if _mailer is not None:
        return _mailer
    return init_mailer()


def send_email(to: str, subject: str, html_content: str) -> bool:
    """Send an HTML email. Returns False when SMTP is not configured."""
    mailer = ensure_mailer()
    if not mailer.enabled:
        logger.info(f"Email to {to} skipped (SMTP not configured): {subject}")
        return False

    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = mailer.from_address
    msg["To"] = to
    msg.attach(MIMEText(html_content, "html"))

    if mailer.port == 465:
        context = ssl.create_default_context()
        server = smtplib.SMTP_SSL(mailer.host, mailer.port, context=context, timeout=30)
    else:
        server = smtplib.SMTP(mailer.host, mailer.port, timeout=30)
        if mailer.use_tls:
            server.starttls(context=ssl.create_default_context())

    try:
        if mailer.username:
            server.login(mailer.username, mailer.password)
        server.sendmail(mailer.from_address.split("<")[-1].rstrip(">"), [to], msg.as_string())
    finally:
        server.quit()

    logger.info(f"✉️ Email sent to {to}: {subject}")
    return True


def _format_date(value: date) -> str:
    return value.strftime("%A, %B %d, %Y")


def _layout(header_color: str, heading: str, body: str) -> str:
    return f"""
    <!DOCTYPE html>
    <html>
      <body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333;">
        <div style="max-width: 600px; margin: 0 auto; padding: 20px;">
          <div style="background: {header_color}; color: white; padding: 20px; text-align: center;">
            <h1>🦷 Dental Clinic</h1>
            {heading}
          </div>
          <div style="background: #f9f9f9; padding: 30px; border-radius: 5px;">
            {body}
          </div>
          <div style="text-align: center; margin-top: 20px; font-size: 12px; color: #666;">
            <p>This is an automated message, please do not reply to this email.</p>
          </div>
        </div>
      </body>
    </html>
    """


def _details(doctor_name: str, appointment_date: date, appointment_time: str, status_html: str) -> str:
    return f"""
    <div style="background: white; padding: 20px; margin: 20px 0;">
      <h3>Appointment Details:</h3>
      <p><strong>Doctor:</strong> Dr. {doctor_name}</p>
      <p><strong>Date:</strong> {_format_date(appointment_date)}</p>
      <p><strong>Time:</strong> {appointment_time}</p>
      <p><strong>Status:</strong> {status_html}</p>
    </div>
    """


def send_appointment_confirmation(
    to: str,
    patient_name: str,
    doctor_name: str,
    appointment_date: date,
    appointment_time: str,
) -> bool:
    """Tell the patient their booking was received and awaits confirmation."""
    body = f"""
    <h2>Hello {patient_name},</h2>
    <p>Your appointment has been successfully booked!</p>
    {_details(doctor_name, appointment_date, appointment_time, "Pending Confirmation")}
    <p>You will receive another email once the clinic confirms your appointment.</p>
    <ul>
      <li>Please arrive 10 minutes before your scheduled time</li>
      <li>Bring any previous dental records if available</li>
      <li>If you need to cancel, please let us know at least 24 hours in advance</li>
    </ul>
    """
    return send_email(
        to,
        "Appointment Confirmation - Dental Clinic",
        _layout("#0066cc", "", body),
    )


def send_appointment_status_update(
    to: str,
    patient_name: str,
    doctor_name: str,
    appointment_date: date,
    appointment_time: str,
    status: str,
) -> bool:
    """Tell the patient their appointment was confirmed or cancelled."""
    confirmed = status == "confirmed"
    color = "#28a745" if confirmed else "#dc3545"
    label = "CONFIRMED" if confirmed else "CANCELLED"

    if confirmed:
        closing = "<p>We look forward to seeing you. Please arrive 10 minutes early.</p>"
    else:
        closing = "<p>If you would like to book another appointment, please visit our website.</p>"

    body = f"""
    <h2>Hello {patient_name},</h2>
    <p>Your appointment has been <strong>{label}</strong>.</p>
    {_details(doctor_name, appointment_date, appointment_time, f'<span style="color: {color};">{label}</span>')}
    {closing}
    """
    return send_email(
        to,
        f"Appointment {label} - Dental Clinic",
        _layout(color, f"<h2>Appointment {label}</h2>", body),
    )
