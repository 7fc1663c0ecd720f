"""
Interview chat session core.

Client-side streaming protocol for agent-driven interviews and knowledge-base
chats relayed through the backend, plus the interview completion relay.
"""

__version__ = "1.0.0"
