"""
AI Service - Gemini text correction with model fallback

The preferred model is tried first, then the remaining models in priority
order. Each model is called once; the first non-empty answer wins.

© 2025 Sven Kalinowski with small help of Lino Casu
Licensed under the Anti-Capitalist Software License v1.4
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

import requests

logger = logging.getLogger("vietcorrect.ai")

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
REQUEST_TIMEOUT = 120


@dataclass(frozen=True)
class ModelInfo:
    id: str
    name: str
    desc: str
    priority: int


@dataclass
class AIResult:
    text: str
    model_used: str


class AIServiceError(Exception):
    """No model could correct the text."""
    pass


MODELS: List[ModelInfo] = [
    ModelInfo("gemini-3-flash-preview", "Gemini 3.0 Flash", "Tốc độ cao, độ trễ thấp (Khuyên dùng)", 1),
    ModelInfo("gemini-3-pro-preview", "Gemini 3.0 Pro", "Xử lý tác vụ phức tạp tốt hơn", 2),
    ModelInfo("gemini-2.5-flash", "Gemini 2.5 Flash", "Model ổn định thế hệ trước", 3),
]

DEFAULT_MODEL = MODELS[0].id

SYSTEM_INSTRUCTION = """Bạn là một trợ lý biên tập văn bản Tiếng Việt chuyên nghiệp. Nhiệm vụ của bạn là chuẩn hóa văn bản đầu vào theo các quy tắc sau:

1. Sửa lỗi chính tả tiếng Việt:
   - Tự động phát hiện và sửa các lỗi chính tả phổ biến (ví dụ: sa/xa, s/x, tr/ch, d/gi/r, dấu hỏi/ngã).
   - Sửa lỗi dấu thanh (đặt sai vị trí dấu).
   - Sửa lỗi thiếu/thừa ký tự trong từ.
   - Sửa lỗi sai phụ âm đầu, vần, phụ âm cuối.

2. Sửa lỗi viết hoa:
   - Viết hoa chữ cái đầu câu.
   - Viết thường các từ bị viết hoa sai (ví dụ: "KHông" -> "không", "BÁO CÁO" -> "Báo cáo" trừ khi là tiêu đề).
   - GIỮ NGUYÊN tên riêng, địa danh, tên viết tắt (UBND, THPT, v.v.).

3. Chuẩn hóa Bullet Points:
   - Chuyển các ký tự đặc biệt (•, ●, -, +) đầu dòng thành gạch đầu dòng chuẩn "- ".
   - Nếu là ý nhỏ hơn (cấp 2), sử dụng "+ ".

4. Định dạng:
   - Giữ nguyên cấu trúc đoạn văn.
   - Xóa khoảng trắng thừa.

CHỈ TRẢ VỀ KẾT QUẢ VĂN BẢN ĐÃ SỬA, KHÔNG KÈM LỜI DẪN HAY GIẢI THÍCH."""


def get_model(model_id: str) -> Optional[ModelInfo]:
    for model in MODELS:
        if model.id == model_id:
            return model
    return None


def model_queue(preferred_model: Optional[str] = None) -> List[str]:
    """Preferred model first, then the rest by priority."""
    ordered = [m.id for m in sorted(MODELS, key=lambda m: m.priority)]
    if not preferred_model:
        return ordered
    return [preferred_model] + [m for m in ordered if m != preferred_model]


def _response_text(data) -> str:
    """Text of the first candidate; empty for any unexpected response shape."""
    if not isinstance(data, dict):
        return ""
    candidates = data.get("candidates")
    if not isinstance(candidates, list) or not candidates or not isinstance(candidates[0], dict):
        return ""
    content = candidates[0].get("content")
    parts = content.get("parts") if isinstance(content, dict) else None
    if not isinstance(parts, list):
        return ""
    return "".join(
        part["text"] for part in parts
        if isinstance(part, dict) and isinstance(part.get("text"), str)
    )


def generate_content(text: str, api_key: str, model_id: str) -> str:
    """Single generateContent call; raises on HTTP errors."""
    response = requests.post(
        f"{GEMINI_BASE_URL}/models/{model_id}:generateContent",
        headers={"x-goog-api-key": api_key},
        json={
            "systemInstruction": {"parts": [{"text": SYSTEM_INSTRUCTION}]},
            "contents": [{"role": "user", "parts": [{"text": text}]}],
        },
        timeout=REQUEST_TIMEOUT,
    )
    response.raise_for_status()
    return _response_text(response.json())


def fix_text_with_ai(
    text: str,
    api_key: str,
    preferred_model: str = DEFAULT_MODEL
) -> AIResult:
    """
    Correct text with the first Gemini model that answers.

    Raises:
        AIServiceError: no API key, or every model failed
    """
    if not api_key:
        raise AIServiceError("Chưa có API Key")

    last_error: Optional[Exception] = None

    for model_id in model_queue(preferred_model):
        try:
            logger.info("Trying model: %s", model_id)
            result_text = generate_content(text, api_key, model_id)
            if result_text:
                return AIResult(text=result_text.strip(), model_used=model_id)
            logger.warning("Model %s returned an empty answer", model_id)
        except (requests.RequestException, ValueError) as e:
            logger.warning("Model %s failed: %s", model_id, e)
            last_error = e

    raise AIServiceError(
        "Không thể xử lý văn bản với bất kỳ model nào."
        + (f" ({last_error})" if last_error else "")
    ) from last_error
