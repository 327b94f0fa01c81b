"""
Memory Match core Python package.

This package contains the game rules and the collaborators the rules talk to,
kept apart from the Flask app and the terminal front end for testability.
Modules:
- board.py: Card, Board, difficulty sizing
- deal.py: Fisher-Yates shuffle and BoardGenerator
- state.py: Session
- guard.py: SessionGuard and the entry point decorators
- scheduler.py: FeedbackScheduler, cancellation tokens, timer backends
- engine.py: GameEngine (the state machine)
- provider.py, db.py, sound.py: card data source, key/value store, sound cues
"""
