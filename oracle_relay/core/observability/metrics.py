from prometheus_client import Counter, Gauge

TICKS_RECEIVED = Counter(
    'relay_ticks_total',
    'Raw feed ticks received',
    ['symbol']
)

TICK_DECISIONS = Counter(
    'relay_tick_decisions_total',
    'Change detector outcomes per tick',
    ['symbol', 'decision']
)

DELIVERIES = Counter(
    'relay_deliveries_total',
    'Messages handed to the consensus application',
    ['kind', 'result']
)

BROADCASTS = Counter(
    'relay_broadcasts_total',
    'Transactions submitted to the broadcast endpoint',
    ['result']
)

DEPOSITS = Counter(
    'relay_deposits_total',
    'Deposit events observed on chain',
    ['source']
)

FEED_CONNECTED = Gauge(
    'relay_feed_connected',
    'Whether the feed websocket for a symbol is connected',
    ['symbol']
)

CONSENSUS_CONNECTED = Gauge(
    'relay_consensus_connected',
    'Whether the consensus application websocket is connected'
)
