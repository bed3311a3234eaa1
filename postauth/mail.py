"""Delivers one-time secrets to users by e-mail."""

import logging
import smtplib
from email.message import EmailMessage

from flask import Flask, current_app

logger = logging.getLogger(__name__)


class MailSession(object):
    """An open session with an SMTP service."""

    def __init__(self, host: str = "", port: int = 0,
                 sender: str = "") -> None:
        self._host = host
        self._port = port
        self._sender = sender

    def _new_connection(self) -> smtplib.SMTP:
        return smtplib.SMTP(host=self._host, port=self._port)

    def send_message(self, to: str, subject: str, body: str) -> None:
        """Send a plain text message."""
        if not self._host:
            logger.warning('No mail host configured; not sending "%s" to %s',
                           subject, to)
            return
        message = EmailMessage()
        message['From'] = self._sender
        message['To'] = to
        message['Subject'] = subject
        message.set_content(body)
        with self._new_connection() as conn:
            conn.send_message(message)
        logger.debug('Sent "%s" to %s', subject, to)

    def send_pin(self, to: str, pin: str) -> None:
        """Send the pin that confirms a registration."""
        self.send_message(to, 'Confirm your account',
                          f'Your confirmation pin is {pin}.')

    def send_temporary_password(self, to: str, token_id: str,
                                password: str) -> None:
        """Send the temporary password that allows a password reset."""
        self.send_message(to, 'Reset your password',
                          f'Your temporary password is {password}.\n'
                          f'Reset request: {token_id}')

    @classmethod
    def init_app(cls, app: Flask) -> None:
        """Set default configuration parameters for an application instance."""
        app.config.setdefault('MAIL_HOST', '')
        app.config.setdefault('MAIL_PORT', '25')
        app.config.setdefault('MAIL_SENDER', 'no-reply@localhost')

    @classmethod
    def current_session(cls) -> 'MailSession':
        """Get a :class:`MailSession` for the current application."""
        config = current_app.config
        return cls(config.get('MAIL_HOST', ''),
                   int(config.get('MAIL_PORT', '25')),
                   config.get('MAIL_SENDER', 'no-reply@localhost'))
