PROXY_ERROR_HEADER = "X-Asset-Proxy-Error"

BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

DEFAULT_CONTENT_TYPE = "application/octet-stream"

MISSING_URL_MESSAGE = (
    'Error: Missing target URL. Please provide a URL in the "url" query parameter.'
)
NOT_FOUND_MESSAGE = "Not Found"
UPSTREAM_ERROR_MESSAGE = "Proxy Error: Could not reach target URL or unexpected error: {reason}"
INTERNAL_ERROR_MESSAGE = "An internal proxy server error occurred."

STRIP_REQUEST_HEADERS = frozenset({
    "host",
    "connection",
    "x-forwarded-for",
    "x-forwarded-host",
    "x-forwarded-proto",
    "x-forwarded-ssl",
    "via",
    "forwarded",
    "cf-connecting-ip",
    "true-client-ip",
    "x-real-ip",
    "x-cluster-client-ip",
    "x-app-name",
    "x-app-version",
    "accept-encoding",
})

# Conditional requests would let the upstream answer 304 with an empty body
STRIP_ASSET_REQUEST_HEADERS = STRIP_REQUEST_HEADERS | {
    "if-none-match",
    "if-modified-since",
}

STRIP_RESPONSE_HEADERS = frozenset({
    "set-cookie",
    "connection",
    "content-length",
    "content-encoding",
    "transfer-encoding",
})

# (path substrings, Accept value); first match wins
ASSET_ACCEPT_TABLE = (
    ((".js", ".mjs"), "application/javascript, */*;q=0.8"),
    ((".css",), "text/css, */*;q=0.8"),
    ((".wasm",), "application/wasm, application/x-wasm, */*;q=0.8"),
    ((".pk3",), "application/octet-stream, */*;q=0.8"),
    ((".",), "image/*, audio/*, video/*, application/json, text/*, */*;q=0.8"),
)
ASSET_ACCEPT_FALLBACK = "*/*"

# (path substring, corrected content type) applied when upstream claims text/html
ASSET_MIME_CORRECTIONS = (
    (".js", "application/javascript"),
    (".wasm", "application/wasm"),
    (".pk3", "application/octet-stream"),
)
