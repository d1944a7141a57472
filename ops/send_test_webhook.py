"""Post sample Twilio webhook forms to a running relay and print the TwiML replies."""

import sys

import httpx

BASE_URL = sys.argv[1] if len(sys.argv) > 1 else "http://localhost:8000"

samples = [
    {"From": "whatsapp:+5215500000000", "Body": "Hola", "NumMedia": "0"},
    {"From": "whatsapp:+5215500000000", "Body": "¿Cuánto puedo ganar?", "NumMedia": "0"},
    {"Body": "sin remitente"},
    {
        "From": "whatsapp:+5215500000000",
        "Body": "",
        "NumMedia": "1",
        "MediaUrl0": "https://example.com/foto.jpg",
        "MediaContentType0": "image/jpeg",
    },
]

for form in samples:
    r = httpx.post(f"{BASE_URL}/webhook", data=form, timeout=60)
    print(f"{form.get('Body', '')[:30]!r:<34} -> {r.status_code} {r.text[:100]}")
