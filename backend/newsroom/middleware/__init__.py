"""HTTP middleware: request correlation, access logging, security headers, throttling."""
