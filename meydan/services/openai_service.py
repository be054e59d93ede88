# meydan/services/openai_service.py
import logging
from typing import Optional
from flask import Flask
from openai import OpenAI

CAPTION_STYLE = (
    "Make it sound natural and add 2-3 relevant hashtags. "
    "Do not wrap the response in markdown. Just return the plain text caption."
)


def build_text_prompt(prompt: str) -> str:
    return (
        "Generate a short, engaging, and cool social media caption. "
        f"The user is writing about: \"{prompt}\". {CAPTION_STYLE}"
    )


def build_image_prompt(prompt: Optional[str]) -> str:
    base = "Generate a short, engaging, and cool social media caption for this image."
    if prompt and prompt.strip():
        return f"{base} The user provided this additional context: \"{prompt}\". {CAPTION_STYLE}"
    return f"{base} {CAPTION_STYLE}"


class OpenAIService:
    """
    OpenAI API 연동을 담당하는 서비스 클래스.
    캡션 프록시 엔드포인트에서만 사용되며, API 키는 서버 설정에만 존재합니다.
    """

    def __init__(self):
        """실제 클라이언트는 init_app 메서드를 통해 설정됩니다."""
        self.client = None
        self.model = None

    def init_app(self, app: Flask, client=None):
        """
        Flask 앱 초기화 과정에서 호출되어 OpenAI 클라이언트를 설정합니다.
        키가 없으면 클라이언트 없이 남겨두고, 호출 시 오류를 돌려줍니다.

        :param app: Flask 애플리케이션 객체
        :param client: 테스트 등에서 직접 주입할 클라이언트 (선택)
        """
        self.model = app.config.get('OPENAI_CAPTION_MODEL', 'gpt-4o-mini')
        if client is not None:
            self.client = client
            return

        api_key = app.config.get('OPENAI_API_KEY')
        if not api_key:
            logging.warning("OPENAI_API_KEY가 설정되지 않아 캡션 생성이 비활성화됩니다.")
            return

        self.client = OpenAI(api_key=api_key)
        logging.info("OpenAIService: OpenAI API 서비스가 성공적으로 초기화되었습니다.")

    def _complete(self, content) -> str:
        if not self.client:
            raise RuntimeError("OPENAI_API_KEY environment variable not set on the caption proxy.")

        response = self.client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": content}],
            max_tokens=200
        )
        caption = response.choices[0].message.content
        if not caption or not caption.strip():
            raise ValueError("The model returned an empty caption.")
        return caption.strip()

    def generate_caption_from_text(self, prompt: str) -> str:
        """사용자가 쓰고 있는 글을 바탕으로 캡션을 생성합니다."""
        return self._complete(build_text_prompt(prompt))

    def generate_caption_from_image(self, image_data: str, mime_type: str, prompt: Optional[str] = None) -> str:
        """
        base64 인코딩된 이미지(와 선택적 맥락 텍스트)로 캡션을 생성합니다.

        :param image_data: data: 접두사가 없는 base64 문자열
        :param mime_type: 이미지 MIME 타입 (예: "image/png")
        :param prompt: 사용자가 덧붙인 맥락 (선택)
        """
        return self._complete([
            {"type": "text", "text": build_image_prompt(prompt)},
            {"type": "image_url", "image_url": {"url": f"data:{mime_type};base64,{image_data}"}},
        ])
