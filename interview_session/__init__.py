"""Mock-interview session orchestration: state machine, session store, retries and expiry."""
