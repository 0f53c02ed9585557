"""ByteBros shop backend."""
