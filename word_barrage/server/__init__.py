"""HTTP and WebSocket state authority.

WHY: Lets recognition bridges, admin tools and renderers share one
BarrageSession across processes.

HOW: app.py holds the FastAPI app and its tick/broadcast tasks,
models.py the pydantic schemas, hub.py the WebSocket fan-out.
"""
