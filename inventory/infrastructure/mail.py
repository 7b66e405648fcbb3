# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Outbound e-mail for account notifications."""

from __future__ import annotations

import smtplib
from email.mime.text import MIMEText

from inventory.domain.users.repositories import NotificationPort
from inventory.shared.config import MailConfig
from inventory.shared.errors.base import NotificationError
from inventory.shared.logging import logger


class SmtpNotificationAdapter(NotificationPort):
    """Plain-text SMTP sender. Without ``EMAIL_HOST`` every send is a no-op."""

    def __init__(self, config: MailConfig) -> None:
        self._config = config

    def send(self, to: str, subject: str, body: str) -> None:
        if not self._config.enabled:
            logger.info(f"mail.send: EMAIL_HOST not configured, skipping '{subject}'")
            return

        msg = MIMEText(body, "plain", "utf-8")
        msg["Subject"] = subject
        msg["From"] = self._config.from_addr
        msg["To"] = to

        try:
            with smtplib.SMTP(
                self._config.host, self._config.port, timeout=self._config.timeout
            ) as server:
                server.ehlo()
                if self._config.port != 25:
                    server.starttls()
                    server.ehlo()
                if self._config.username and self._config.password:
                    server.login(self._config.username, self._config.password)
                server.sendmail(self._config.from_addr, [to], msg.as_string())
        except (smtplib.SMTPException, OSError) as exc:
            raise NotificationError(type(exc).__name__) from exc

        logger.info(f"mail.send: delivered '{subject}'")


__all__ = ["SmtpNotificationAdapter"]
