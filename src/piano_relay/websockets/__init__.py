"""
Websocket relay: wire protocol, shared room state and the server.
"""
