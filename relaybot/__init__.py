"""
RelayBot: Resilient API Gateway for Chat Bots

Relays chat messages to third-party web APIs (AI chat models, translation,
search, weather, media, phone lookup, text-to-speech) through a single
gateway that caches, rate limits, retries and normalizes every outbound call,
and turns the result into a plain text (or media) reply.
"""

__version__ = "0.1.0"
