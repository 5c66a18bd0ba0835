"""Notifier that prints notifications to the terminal."""

import click

from pocketledger.domain.notifications import Notification, NotificationKind, Notifier


class ClickNotifier(Notifier):
    """Echo success and info notifications to stdout, errors to stderr."""

    def __init__(self, quiet: bool = False) -> None:
        self.quiet = quiet

    def notify(self, notification: Notification) -> None:
        if self.quiet:
            return
        text = notification.title
        if notification.message:
            text = f"{text}: {notification.message}"
        if notification.kind == NotificationKind.ERROR:
            click.echo(text, err=True)
        else:
            click.echo(text)
