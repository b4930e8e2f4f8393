"""
Email templates - the two message shapes the notifier delivers.

An OTP email carries the passcode; a confirmation email carries the race
details. Which one is rendered is decided by the presence of an OTP value.
"""

from dataclasses import dataclass
from html import escape


@dataclass(frozen=True)
class EmailMessage:
    """Rendered email ready for an EmailNotifier."""

    to: str
    subject: str
    html_body: str


def render_otp_email(
    to: str,
    otp: str,
    mobile: str | None = None,
    first_name: str | None = None,
    event_name: str = "ApizRace 2025",
    ttl_minutes: int = 10,
) -> EmailMessage:
    """Render the OTP verification email."""
    body = f"""
      <div style="font-family: Arial, sans-serif; padding: 20px; max-width: 600px; margin: 0 auto;">
        <div style="background-color: #4CAF50; color: white; padding: 20px; text-align: center;">
          <h1>OTP Verification</h1>
        </div>
        <div style="padding: 20px; background-color: #f9f9f9;">
          <p>Hello {escape(first_name or "there")},</p>
          <p>Your OTP for {escape(event_name)} registration is:</p>
          <h2 style="color: #4CAF50; text-align: center; font-size: 32px; letter-spacing: 5px; margin: 20px 0;">
            {escape(otp)}
          </h2>
          <p><strong>Mobile Number:</strong> {escape(mobile or "Not provided")}</p>
          <p>This OTP will expire in {ttl_minutes} minutes.</p>
          <p>If you didn't request this OTP, please ignore this email or contact our support immediately.</p>
          <p style="margin-top: 30px; font-size: 12px; color: #666;">
            For security reasons, please do not share this OTP with anyone.
          </p>
        </div>
      </div>
    """
    return EmailMessage(to=to, subject=f"OTP Verification - {event_name}", html_body=body)


def render_confirmation_email(
    to: str,
    first_name: str,
    last_name: str,
    race_category: str,
    t_shirt_size: str,
    event_name: str = "ApizRace 2025",
    support_email: str | None = None,
) -> EmailMessage:
    """Render the registration confirmation email."""
    contact = "please don't hesitate to contact us"
    if support_email:
        contact = (
            f'please contact us at <a href="mailto:{escape(support_email)}">{escape(support_email)}</a>'
        )
    body = f"""
      <div style="max-width: 600px; margin: 0 auto; font-family: Arial, sans-serif; background-color: #ffffff;">
        <div style="background-color: #4CAF50; color: white; padding: 20px; text-align: center;">
          <h1 style="margin: 0; font-size: 24px;">{escape(event_name)}</h1>
          <p style="margin: 10px 0 0 0;">Registration Confirmation</p>
        </div>
        <div style="padding: 20px;">
          <p>Dear {escape(first_name)} {escape(last_name)},</p>
          <p>Thank you for registering for {escape(event_name)}! Your registration has been successfully completed.</p>
          <p><strong>Registration Details:</strong></p>
          <ul style="list-style-type: none; padding: 0;">
            <li><strong>Race Category:</strong> {escape(race_category)}</li>
            <li><strong>T-Shirt Size:</strong> {escape(t_shirt_size)}</li>
          </ul>
          <p>We will send you further details about the race day schedule and requirements closer to the event date.</p>
          <p>If you have any questions, {contact}.</p>
        </div>
        <div style="text-align: center; padding: 20px; color: #666;">
          <p>Best regards,<br>Team {escape(event_name)}</p>
        </div>
      </div>
    """
    return EmailMessage(
        to=to, subject=f"Registration Confirmation - {event_name}", html_body=body
    )


def render_email(
    to: str,
    first_name: str | None = None,
    last_name: str | None = None,
    mobile: str | None = None,
    otp: str | None = None,
    race_category: str | None = None,
    t_shirt_size: str | None = None,
    event_name: str = "ApizRace 2025",
    support_email: str | None = None,
) -> EmailMessage:
    """Pick the OTP template when an OTP is present, otherwise the confirmation."""
    if otp:
        return render_otp_email(
            to, otp, mobile=mobile, first_name=first_name, event_name=event_name
        )
    return render_confirmation_email(
        to,
        first_name or "",
        last_name or "",
        race_category or "",
        t_shirt_size or "",
        event_name=event_name,
        support_email=support_email,
    )
