"""MultiversX wallet for the agent.

One Ed25519 credential, one network profile, a serialized send path that
owns nonce assignment, and a watcher that follows each submitted
transaction to success, failure or timeout.
"""
