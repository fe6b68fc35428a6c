import asyncio
import random
import httpx
import logging
from fastapi import HTTPException, status
from typing import Dict, List, Optional

from cloud_ide.core.config import settings

logger = logging.getLogger(__name__)


async def call_ai_service(
    messages: List[Dict[str, str]],
    temperature: float = 0.7,
    max_tokens: int = 8000,
    retries: int = 3,
    connect_timeout: int = 10,
    read_timeout: int = 120,
) -> str:
    """Run a chat completion against the Groq API and return the reply text."""
    if not settings.groq_api_key:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Groq API key not configured",
        )

    payload = {
        "messages": messages,
        "model": settings.groq_model,
        "temperature": temperature,
        "max_tokens": max_tokens,
        "top_p": 1,
        "stream": False,
    }
    headers = {
        "Content-Type": "application/json",
        "Authorization": f"Bearer {settings.groq_api_key}",
    }
    timeout = httpx.Timeout(
        connect=connect_timeout,
        read=read_timeout,
        write=10,
        pool=10,
    )
    last_error: Optional[str] = None

    for attempt in range(1, retries + 1):
        try:
            logger.info(
                f"Calling AI service (attempt {attempt}/{retries}) → {settings.groq_api_url}"
            )

            async with httpx.AsyncClient(timeout=timeout) as client:
                response = await client.post(
                    settings.groq_api_url,
                    json=payload,
                    headers=headers,
                )

            # --- SUCCESS ---
            if response.status_code == 200:
                data = response.json()
                choices = data.get("choices") or []
                content = choices[0].get("message", {}).get("content") if choices else None
                if not content:
                    logger.error(f"AI service returned no message: {data}")
                    raise HTTPException(
                        status_code=status.HTTP_502_BAD_GATEWAY,
                        detail="Failed to get response from Groq AI",
                    )
                return content

            # --- no retry on 4xx ---
            if response.status_code == 401:
                raise HTTPException(
                    status_code=status.HTTP_401_UNAUTHORIZED,
                    detail="Invalid Groq API key. Please check your configuration.",
                )
            if response.status_code == 429:
                raise HTTPException(
                    status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                    detail="Rate limit exceeded. Please try again later.",
                )
            if 400 <= response.status_code < 500:
                logger.error(
                    f"AI service returned {response.status_code}: {response.text}"
                )
                raise HTTPException(
                    status_code=response.status_code,
                    detail=response.text,
                )

            # --- 5xx → retry ---
            last_error = f"Status {response.status_code}: {response.text}"
            logger.warning(
                f"AI service error {response.status_code} "
                f"(attempt {attempt}/{retries})"
            )

        except httpx.ReadTimeout as e:
            last_error = f"ReadTimeout: {e}"
            logger.warning(f"AI read timeout (attempt {attempt}/{retries})")

        except httpx.ConnectTimeout as e:
            last_error = f"ConnectTimeout: {e}"
            logger.warning(f"AI connect timeout (attempt {attempt}/{retries})")

        except httpx.RequestError as e:
            last_error = str(e)
            logger.warning(f"AI request error (attempt {attempt}/{retries}): {repr(e)}")

        # --- BACKOFF + JITTER ---
        if attempt < retries:
            delay = min(2**attempt, 10) + random.uniform(0, 1)
            logger.info(f"Retrying in {delay:.1f}s...")
            await asyncio.sleep(delay)

    logger.error(
        f"AI service unavailable after {retries} retries. Last error: {last_error}"
    )

    raise HTTPException(
        status_code=status.HTTP_502_BAD_GATEWAY,
        detail="AI service unavailable after multiple retries",
    )
