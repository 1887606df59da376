"""
Browser page for pairing: shows the QR code and the connection status.

The page itself is public. When an API key is configured, open it as
/qr?token=<API_KEY>; the script forwards the token to the protected API.
"""

from fastapi import APIRouter
from fastapi.responses import HTMLResponse

from wagate.core.config.settings import settings

router = APIRouter(tags=["Pairing"])

POLL_INTERVAL_MS = 3000

_PAGE = """<!DOCTYPE html>
<html>
<head>
  <title>WhatsApp QR - __TITLE__</title>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <style>
    body {
      font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
      display: flex; align-items: center; justify-content: center;
      min-height: 100vh; margin: 0; background: #f5f5f5;
    }
    .card {
      background: white; padding: 40px; border-radius: 16px;
      box-shadow: 0 4px 20px rgba(0,0,0,0.1); text-align: center;
    }
    h1 { color: #25D366; margin-bottom: 10px; }
    #qr { margin: 20px 0; }
    #qr img { max-width: 280px; }
    .status { padding: 10px 20px; border-radius: 8px; margin-top: 20px; }
    .connected { background: #d4edda; color: #155724; }
    .waiting { background: #fff3cd; color: #856404; }
    .error { background: #f8d7da; color: #721c24; }
  </style>
</head>
<body>
  <div class="card">
    <h1>WhatsApp QR</h1>
    <p>Scan the QR code with WhatsApp on your phone</p>
    <div id="qr">Loading...</div>
    <div id="status" class="status waiting">Waiting...</div>
  </div>
  <script>
    const token = new URLSearchParams(window.location.search).get('token');
    const headers = token ? { 'Authorization': 'Bearer ' + token } : {};

    function show(kind, text) {
      const el = document.getElementById('status');
      el.className = 'status ' + kind;
      el.textContent = text;
    }

    async function refresh() {
      const qrEl = document.getElementById('qr');
      try {
        const res = await fetch('/api/status', { headers });
        if (res.status === 401) {
          show('error', 'Unauthorized: open this page as /qr?token=<API_KEY>');
          return;
        }
        const status = await res.json();

        if (status.connected) {
          qrEl.innerHTML = '<p style="color: #25D366; font-size: 48px;">&#10003;</p>';
          show('connected', 'Connected: ' + status.phone);
        } else if (status.hasQR) {
          const qr = await (await fetch('/api/qr', { headers })).json();
          if (qr.qr) {
            qrEl.innerHTML = '<img src="' + qr.qr + '" alt="QR Code">';
            show('waiting', 'Scan the QR code with WhatsApp');
          }
        } else {
          show('waiting', 'Waiting for QR code...');
        }
      } catch (e) {
        show('error', 'Connection error');
      }
    }

    refresh();
    setInterval(refresh, __POLL_INTERVAL__);
  </script>
</body>
</html>
"""


@router.get("/qr", response_class=HTMLResponse, include_in_schema=False)
async def qr_page() -> HTMLResponse:
    """Pairing page polling /api/status and /api/qr."""
    html = _PAGE.replace("__TITLE__", settings.browser_name).replace(
        "__POLL_INTERVAL__", str(POLL_INTERVAL_MS)
    )
    return HTMLResponse(html)
