"""Conversation-to-ticket intake service."""
