"""Relay SonarQube scan webhooks to DingTalk group robots."""

__version__ = "0.3.0"
