"""Realtime transport: identity registry, dispatcher and the Socket.IO namespace."""
