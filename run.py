"""로컬 개발 서버. HOST/PORT 환경 변수로 바인딩 변경 가능(기본 127.0.0.1:8000)."""
import asyncio
import os
import sys

if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

import uvicorn

if __name__ == "__main__":
    uvicorn.run(
        "app.main:app",
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8000")),
        reload=True,
        # 세션 쿠키 도메인 계산에 Host 헤더를 쓰므로 로컬에서는 프록시 헤더 불신
        proxy_headers=False,
    )
