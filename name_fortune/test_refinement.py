"""Tests for the external refinement override and its fallback guarantees."""

from __future__ import annotations

import asyncio
import json
import unittest
from unittest.mock import AsyncMock, patch

import httpx

from name_fortune import refinement
from name_fortune.scoring import analyze_name

FULL_REPLY = """점수: 92
등급: 우수
성향제목: 따뜻한 리더
성향설명: 사람을 모으는 힘이 있습니다.
추천물건1: 금반지
추천물건2: 붉은 스카프
추천물건3: 원목 상자
피할물건1: 검은 우산
피할물건2: 깨진 컵
피할물건3: 낡은 시계"""


def _gemini_body(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestParseReply(unittest.TestCase):
    def test_full_template(self) -> None:
        parsed = refinement.parse_reply(FULL_REPLY)
        self.assertEqual(parsed["score"], 92)
        self.assertEqual(parsed["grade"], "우수")
        self.assertEqual(parsed["personality_title"], "따뜻한 리더")
        self.assertEqual(parsed["recommended3"], "원목 상자")
        self.assertEqual(parsed["avoid1"], "검은 우산")

    def test_fullwidth_colon_and_noise_lines(self) -> None:
        parsed = refinement.parse_reply("분석 결과입니다.\n\n  점수： 88  \n- 등급: 우수\n감사합니다")
        self.assertEqual(parsed, {"score": 88, "grade": "우수"})

    def test_numbered_and_bold_lines(self) -> None:
        parsed = refinement.parse_reply("1. 점수: 92\n2. 등급: 우수\n3) **성향제목**: 따뜻한 리더\n(10) 피할물건3: 낡은 시계")
        self.assertEqual(parsed["score"], 92)
        self.assertEqual(parsed["grade"], "우수")
        self.assertEqual(parsed["personality_title"], "따뜻한 리더")
        self.assertEqual(parsed["avoid3"], "낡은 시계")

    def test_empty_reply_yields_null_score(self) -> None:
        self.assertEqual(refinement.parse_reply(""), {"score": None})
        self.assertEqual(refinement.parse_reply("   \n "), {"score": None})
        self.assertEqual(refinement.parse_reply(None), {"score": None})

    def test_no_matches_yields_null_score(self) -> None:
        self.assertEqual(refinement.parse_reply("좋은 이름입니다."), {"score": None})

    def test_out_of_range_score_yields_null_score(self) -> None:
        self.assertEqual(refinement.parse_reply("점수: 0\n등급: 우수"), {"score": None})
        self.assertEqual(refinement.parse_reply("점수: 101"), {"score": None})


class TestOverrideGuard(unittest.TestCase):
    def test_sentinel_rejected(self) -> None:
        self.assertFalse(refinement.is_usable_override({"score": refinement.SENTINEL_SCORE, "grade": "보통"}))

    def test_out_of_range_rejected(self) -> None:
        for score in (0, 101, -5, None, "90", True):
            with self.subTest(score=score):
                self.assertFalse(refinement.is_usable_override({"score": score}))

    def test_valid_scores_accepted(self) -> None:
        for score in (1, 70, 74, 76, 100):
            with self.subTest(score=score):
                self.assertTrue(refinement.is_usable_override({"score": score}))


class TestCallGeminiApi(unittest.TestCase):
    def test_request_shape_and_text_extraction(self) -> None:
        seen: dict = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["key"] = request.url.params.get("key")
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=_gemini_body("점수: 90"))

        async def run() -> str:
            async with _client(handler) as client:
                return await refinement.call_gemini_api("prompt", api_key="secret", model="m1", client=client)

        text = asyncio.run(run())
        self.assertEqual(text, "점수: 90")
        self.assertEqual(seen["key"], "secret")
        self.assertTrue(seen["path"].endswith("/models/m1:generateContent"))
        self.assertEqual(seen["body"]["contents"][0]["parts"][0]["text"], "prompt")
        self.assertEqual(
            seen["body"]["generationConfig"],
            {"temperature": 0.3, "topK": 20, "topP": 0.8, "maxOutputTokens": 1024},
        )

    def test_non_ok_status_raises(self) -> None:
        async def run() -> str:
            async with _client(lambda request: httpx.Response(503, text="busy")) as client:
                return await refinement.call_gemini_api("p", api_key="k", client=client)

        with self.assertRaises(refinement.RefinementError):
            asyncio.run(run())

    def test_missing_candidates_raises(self) -> None:
        async def run() -> str:
            async with _client(lambda request: httpx.Response(200, json={"promptFeedback": {}})) as client:
                return await refinement.call_gemini_api("p", api_key="k", client=client)

        with self.assertRaises(refinement.RefinementError):
            asyncio.run(run())

    def test_missing_key_raises(self) -> None:
        with self.assertRaises(refinement.RefinementError):
            asyncio.run(refinement.call_gemini_api("p", api_key=""))


class TestRefineResult(unittest.TestCase):
    def setUp(self) -> None:
        self.local = analyze_name("홍길동")

    def _refine(self, handler):
        async def run():
            async with _client(handler) as client:
                return await refinement.refine_result(
                    self.local, name="홍길동", hanja="", api_key="k", request_id="req-1", client=client
                )

        return asyncio.run(run())

    def test_valid_reply_overrides_local(self) -> None:
        result = self._refine(lambda request: httpx.Response(200, json=_gemini_body(FULL_REPLY)))
        self.assertEqual(result.score, 92)
        self.assertEqual(result.personality_title, "따뜻한 리더")
        self.assertEqual(result.detailed_analysis["source"], "gemini")

    def test_partial_reply_keeps_local_fields(self) -> None:
        result = self._refine(lambda request: httpx.Response(200, json=_gemini_body("점수: 88")))
        self.assertEqual(result.score, 88)
        self.assertEqual(result.grade, "우수")
        self.assertEqual(result.personality_title, self.local.personality_title)
        self.assertEqual(result.avoid3, self.local.avoid3)

    def test_sentinel_reply_keeps_local(self) -> None:
        reply = FULL_REPLY.replace("점수: 92", "점수: 75")
        result = self._refine(lambda request: httpx.Response(200, json=_gemini_body(reply)))
        self.assertIs(result, self.local)

    def test_empty_reply_keeps_local(self) -> None:
        result = self._refine(lambda request: httpx.Response(200, json=_gemini_body("")))
        self.assertIs(result, self.local)

    def test_malformed_response_keeps_local(self) -> None:
        result = self._refine(lambda request: httpx.Response(200, json={"candidates": []}))
        self.assertIs(result, self.local)

    def test_network_failure_keeps_local(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("unreachable", request=request)

        with self.assertLogs("refinement_audit", level="INFO") as logs:
            result = self._refine(handler)
        self.assertIs(result, self.local)
        self.assertIn('"outcome":"error"', logs.output[0])

    def test_missing_key_skips_call(self) -> None:
        with patch.object(refinement, "call_gemini_api", new=AsyncMock()) as mock_call:
            result = asyncio.run(refinement.refine_result(self.local, name="홍길동", hanja="", api_key=None))
        self.assertIs(result, self.local)
        mock_call.assert_not_awaited()


def test_prompt_embeds_name_and_template() -> None:
    prompt = refinement.build_prompt("홍길동")
    assert "이름: 홍길동" in prompt
    assert "한자: 없음" in prompt
    for label in ("점수:", "등급:", "성향제목:", "성향설명:", "추천물건3:", "피할물건3:"):
        assert label in prompt
    assert "한자: 洪吉童" in refinement.build_prompt("홍길동", "洪吉童")


if __name__ == "__main__":
    unittest.main()
