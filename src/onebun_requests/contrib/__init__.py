"""
Contrib modules for onebun-requests.

Optional integrations with third-party libraries. A contrib module is only
importable when its extra is installed.

Available contrib modules:
- opentelemetry: trace id from the current span, metrics via an OTel meter
"""
