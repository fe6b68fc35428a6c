import logging
from html import escape

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail
from cloud_ide.core.config import settings

logger = logging.getLogger(__name__)


def _deliver(to_email: str, subject: str, html_content: str, plain_text: str) -> bool:
    """Send one message through SendGrid.

    Without SendGrid credentials the message is only written to the log.
    Returns False when delivery fails; never raises.
    """
    if not settings.sendgrid_api_key or not settings.sendgrid_from_email:
        logger.info(
            "Email credentials not configured, logging message instead.\n"
            f"To: {to_email}\nSubject: {subject}\n\n{plain_text}"
        )
        return True

    try:
        message = Mail(
            from_email=settings.sendgrid_from_email,
            to_emails=to_email,
            subject=subject,
            html_content=html_content,
        )

        sg = SendGridAPIClient(settings.sendgrid_api_key)
        response = sg.send(message)
        logger.info(f"Email '{subject}' sent to {to_email}, status: {response.status_code}")
        return True

    except Exception:
        logger.exception(f"Failed to send email to {to_email}")
        return False


def send_collaboration_email(to_email: str, from_email: str, project_name: str) -> bool:
    """Invite ``to_email`` to collaborate on ``project_name``."""
    subject = f'You\'ve been invited to collaborate on "{project_name}"'
    html_content = f"""
    <html>
        <body style="font-family: Arial, sans-serif; line-height: 1.6;">
            <h2 style="color: #667eea;">Collaboration Invitation</h2>
            <p><b>{escape(from_email)}</b> has invited you to collaborate on the project
            <b>"{escape(project_name)}"</b> in Cloud IDE.</p>
            <p>Log in to your Cloud IDE account to start collaborating!</p>
            <br>
            <p>Best regards,<br>Cloud IDE Team</p>
        </body>
    </html>
    """
    plain_text = (
        f'{from_email} has invited you to collaborate on the project "{project_name}" '
        "in Cloud IDE.\nLog in to your account to start collaborating!"
    )
    return _deliver(to_email, subject, html_content, plain_text)


def send_change_notification_email(
    to_email: str, changed_by: str, project_name: str, change_message: str
) -> bool:
    """Tell ``to_email`` that ``changed_by`` modified ``project_name``."""
    subject = f'"{project_name}" was updated by {changed_by}'
    html_content = f"""
    <html>
        <body style="font-family: Arial, sans-serif; line-height: 1.6;">
            <h2 style="color: #667eea;">Project Update Notification</h2>
            <p><b>{escape(changed_by)}</b> has made changes to <b>"{escape(project_name)}"</b>.</p>
            <div style="background-color: #f8f9fa; padding: 15px; border-left: 4px solid #667eea;">
                <h3 style="margin: 0 0 10px 0; font-size: 16px;">Change Description:</h3>
                <p style="margin: 0; white-space: pre-wrap;">{escape(change_message)}</p>
            </div>
            <p>Log in to Cloud IDE to view the changes!</p>
            <br>
            <p>Best regards,<br>Cloud IDE Team</p>
        </body>
    </html>
    """
    plain_text = (
        f'{changed_by} has made changes to the project "{project_name}".\n\n'
        f"Change Description:\n{change_message}"
    )
    return _deliver(to_email, subject, html_content, plain_text)
