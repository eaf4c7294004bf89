"""
NoteCollab Backend - Real-time Collaborative Note Editing

Presence-aware rooms over WebSocket, last-writer-wins edit broadcast and a
bounded undo/redo version history for every note.
"""

__version__ = "1.0.0"
