from flask import current_app
from flask_mail import Message, Mail
from threading import Thread

mail = Mail()


def send_async_email(app, msg):
    with app.app_context():
        try:
            mail.send(msg)
        except Exception as e:
            app.logger.error(f"Failed to send email: {e}")


def send_guest_invitation_email(registration, event, inviter):
    """Invite a guest to an event they were registered for by ``inviter``.

    Delivery is best effort: in testing, or when no mail server is
    configured, the message is only logged.
    """
    app = current_app._get_current_object()
    inviter_name = inviter.name if inviter else "A participant"
    event_url = f"{app.config.get('CLIENT_URL')}/events/{event.id}"

    if app.testing or not app.config.get("MAIL_SERVER"):
        app.logger.info("--- MOCK INVITATION EMAIL ---")
        app.logger.info(f"To: {registration.invited_email}")
        app.logger.info(f"Subject: You're invited - {event.name}")
        app.logger.info(f"Invited by: {inviter_name}")
        app.logger.info(f"Registration code: {registration.registration_code}")
        app.logger.info(f"Event URL: {event_url}")
        app.logger.info("--- END MOCK INVITATION EMAIL ---")
        return

    msg = Message(
        f"You're invited - {event.name}",
        sender=(app.config.get("MAIL_SENDER_NAME"), app.config.get("MAIL_USERNAME")),
        recipients=[registration.invited_email],
    )

    msg.body = f"""
Hello,

{inviter_name} has registered you as a guest for "{event.name}".

Event Details:
- Date: {event.start_date.strftime('%B %d, %Y at %I:%M %p')}
- Location: {event.location}

Your registration code is {registration.registration_code}. Show it at the entrance to check in.

Event page: {event_url}
"""

    Thread(target=send_async_email, args=(app, msg)).start()
