import os

# Bind to the port provided via the PORT environment variable, defaulting to
# 5000.
bind = f"0.0.0.0:{os.getenv('PORT', '5000')}"

# The listing cache lives in process memory; one worker keeps invalidation
# visible to every request. Scale with threads instead.
worker_class = "gthread"
workers = 1
threads = int(os.getenv("GUNICORN_THREADS", "4"))
timeout = 30
