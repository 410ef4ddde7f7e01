#!/usr/bin/env python3
"""
Sitefront entry point for local development
"""
import uvicorn
import os

if __name__ == "__main__":
    # Configuration
    port = int(os.getenv("PORT", "8000"))
    host = os.getenv("HOST", "0.0.0.0")

    uvicorn.run(
        "sitefront.main:app",
        host=host,
        port=port,
        workers=1,  # Domain-check and content caches are per process
        log_level="info",
        access_log=True,
        proxy_headers=True,
        forwarded_allow_ips="*",
    )
