"""Infrastructure: document storage, repositories, notification senders."""
