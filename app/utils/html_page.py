# app/utils/html_page.py
from html import escape


def render_status_page(title: str, message: str, success: bool) -> str:
    """Small standalone page for links opened from email. Both strings are escaped."""
    color = "#10b981" if success else "#ef4444"
    safe_title = escape(title)
    return f"""<!DOCTYPE html>
<html>
<head>
  <title>{safe_title} - Kanban Board</title>
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <style>
    body {{ font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
           display: flex; justify-content: center; align-items: center;
           min-height: 100vh; margin: 0; background: #f3f4f6; }}
    .card {{ background: white; padding: 40px; border-radius: 12px;
            box-shadow: 0 4px 6px rgba(0,0,0,0.1); text-align: center; max-width: 400px; }}
    h1 {{ color: {color}; margin-bottom: 16px; }}
    p {{ color: #4b5563; line-height: 1.6; }}
  </style>
</head>
<body>
  <div class="card">
    <h1>{safe_title}</h1>
    <p>{escape(message)}</p>
  </div>
</body>
</html>
"""
