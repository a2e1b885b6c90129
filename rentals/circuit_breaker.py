from pybreaker import CircuitBreaker

# Guards writes of the data document: after repeated write failures the
# store fails fast instead of hammering a broken disk or volume.
store_circuit_breaker = CircuitBreaker(
    fail_max=3,
    reset_timeout=60,
    name="document_store_breaker",
)
