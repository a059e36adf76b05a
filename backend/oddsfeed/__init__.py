"""Odds Feed backend: live sports-odds proxy with REST and WebSocket push."""
