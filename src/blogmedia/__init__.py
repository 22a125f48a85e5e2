"""Blog media service: uploaded images, avatar and captcha endpoints.

Routers stay thin and delegate to services stored on ``app.state``; see
:func:`blogmedia.main.create_app` for the wiring.
"""
