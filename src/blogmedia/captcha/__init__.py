"""Session-bound captcha images."""
