"""Backend routers."""
