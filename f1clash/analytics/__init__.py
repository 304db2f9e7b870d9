"""Anonymous page and feature analytics: events, recording, SQLite storage and admin statistics."""