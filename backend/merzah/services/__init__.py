"""Services Layer - async orchestration of pure core logic over injected stores."""
