"""Notifications app: in-app messages and outgoing e-mail."""
