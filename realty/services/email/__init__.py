from realty.services.email.sendgrid import OutboundEmail, SendGridTransport
from realty.services.email.service import EmailService, NotificationRequest

__all__ = ["EmailService", "NotificationRequest", "OutboundEmail", "SendGridTransport"]
