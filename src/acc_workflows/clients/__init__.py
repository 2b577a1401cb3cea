"""Notification clients for Google APIs."""

from __future__ import annotations

from acc_workflows.clients.calendar import GoogleCalendarClient
from acc_workflows.clients.gmail import GmailClient
from acc_workflows.clients.google import GoogleApiClient, GoogleTokenRefresher

__all__ = ["GmailClient", "GoogleApiClient", "GoogleCalendarClient", "GoogleTokenRefresher"]
