"""
Prometheus metrics shared by the app and its routers
"""

from prometheus_client import Counter, Histogram, Gauge

REQUEST_COUNT = Counter('http_requests_total', 'Total HTTP requests', ['method', 'endpoint', 'status'])
REQUEST_DURATION = Histogram('http_request_duration_seconds', 'HTTP request duration', ['method', 'endpoint'])
ACTIVE_CONNECTIONS = Gauge('http_active_connections', 'Number of active HTTP connections')
TOURNAMENT_JOIN_COUNT = Counter('tournament_joins_total', 'Total tournament join attempts', ['status'])
WALLET_REQUEST_COUNT = Counter('wallet_requests_total', 'Total wallet deposit/withdraw requests', ['action'])
