"""
Tests for ConversationController

Tests the complete turn: Controller -> Executor -> Classifier -> Store

Tenet #1: 100% test coverage for safety-critical code
"""

import asyncio
import json
import pytest
import httpx
from unittest.mock import AsyncMock, patch
from src.client import ClientConfig, RequestFailure, ResilientExecutor
from src.conversation import MessageCategory, Sender
from src.orchestrator import ConversationController
from src.safety import CRISIS_FALLBACK_TEXT


ENDPOINT = "https://companionly.test/chat"


class RecordingSleep:
    """Async sleep stand-in that records requested delays."""
    
    def __init__(self):
        self.delays = []
    
    async def __call__(self, delay):
        self.delays.append(delay)


class BlockingExecutor:
    """Executor that holds the turn open until released."""
    
    def __init__(self, reply):
        self.reply = reply
        self.release = asyncio.Event()
        self.calls = []
    
    async def execute(self, endpoint, payload):
        self.calls.append(payload)
        await self.release.wait()
        return self.reply


def make_controller(handler):
    config = ClientConfig(endpoint=ENDPOINT)
    sleep = RecordingSleep()
    executor = ResilientExecutor(config, transport=httpx.MockTransport(handler), sleep=sleep)
    return ConversationController(config, executor=executor), sleep


class TestEndToEnd:
    """Test complete turns against a mock service."""
    
    @pytest.mark.asyncio
    async def test_support_turn(self):
        requests = []
        
        def handler(request):
            requests.append(json.loads(request.content))
            return httpx.Response(
                200,
                json={"status": "support", "response": "I hear you.", "source_info": "guide-1"}
            )
        
        controller, sleep = make_controller(handler)
        
        accepted = await controller.submit("I feel anxious")
        
        assert accepted is True
        assert requests == [{"user_message": "I feel anxious"}]
        messages = controller.messages
        assert len(messages) == 3
        assert messages[1].text == "I feel anxious"
        assert messages[1].sender == Sender.USER
        reply = messages[2]
        assert reply.text == "I hear you."
        assert reply.sender == Sender.BOT
        assert reply.category == MessageCategory.SUPPORT
        assert reply.citation == "guide-1"
        assert controller.pending is False
        assert sleep.delays == []
    
    @pytest.mark.asyncio
    async def test_service_down_yields_crisis_fallback(self):
        controller, sleep = make_controller(lambda request: httpx.Response(500))
        
        accepted = await controller.submit("help")
        
        assert accepted is True
        reply = controller.messages[-1]
        assert reply.text == CRISIS_FALLBACK_TEXT
        assert reply.category == MessageCategory.CRISIS
        assert controller.pending is False
        assert sleep.delays == [1.0, 2.0]
    
    @pytest.mark.asyncio
    async def test_user_text_is_trimmed(self):
        requests = []
        
        def handler(request):
            requests.append(json.loads(request.content))
            return httpx.Response(200, json={"response": "ok"})
        
        controller, _ = make_controller(handler)
        
        await controller.submit("   I can't sleep  \n")
        
        assert requests == [{"user_message": "I can't sleep"}]
        assert controller.messages[1].text == "I can't sleep"
    
    @pytest.mark.asyncio
    async def test_append_monotonicity(self):
        controller, _ = make_controller(lambda request: httpx.Response(200, json={"response": "ok"}))
        texts = ["first", "second", "third", "fourth"]
        
        for n, text in enumerate(texts, 1):
            await controller.submit(text)
            assert len(controller.messages) == 1 + 2 * n
        
        messages = controller.messages
        assert messages[0].category == MessageCategory.INITIAL
        assert [m.text for m in messages[1::2]] == texts
        assert all(m.sender == Sender.BOT for m in messages[2::2])
    
    @pytest.mark.asyncio
    async def test_conversation_continues_after_failure(self):
        responses = iter([httpx.Response(500) for _ in range(3)] + [httpx.Response(200, json={"response": "back"})])
        controller, _ = make_controller(lambda request: next(responses))
        
        await controller.submit("hello?")
        await controller.submit("are you there?")
        
        categories = [m.category for m in controller.messages[2::2]]
        assert categories == [MessageCategory.CRISIS, MessageCategory.SUPPORT]
        assert controller.messages[-1].text == "back"


class TestGuards:
    """Test silent rejection of invalid submissions."""
    
    @pytest.fixture
    def controller(self):
        return ConversationController(
            ClientConfig(endpoint=ENDPOINT),
            executor=AsyncMock(spec=ResilientExecutor)
        )
    
    @pytest.mark.asyncio
    @pytest.mark.parametrize("text", ["", "   ", "\n\t ", None])
    async def test_empty_input_rejected(self, controller, text):
        before = controller.messages
        
        accepted = await controller.submit(text)
        
        assert accepted is False
        assert controller.messages == before
        assert controller.pending is False
        controller.executor.execute.assert_not_called()
    
    @pytest.mark.asyncio
    async def test_submission_while_pending_rejected(self):
        executor = BlockingExecutor({"status": "support", "response": "I hear you."})
        controller = ConversationController(ClientConfig(endpoint=ENDPOINT), executor=executor)
        
        first = asyncio.create_task(controller.submit("first"))
        await asyncio.sleep(0)
        
        assert controller.pending is True
        assert controller.state().pending is True
        before = controller.messages
        
        accepted = await controller.submit("second")
        
        assert accepted is False
        assert controller.messages == before
        assert controller.pending is True
        
        executor.release.set()
        assert await first is True
        
        assert controller.pending is False
        assert len(executor.calls) == 1
        assert [m.text for m in controller.messages[1:]] == ["first", "I hear you."]

    @pytest.mark.asyncio
    async def test_concurrent_submissions_only_one_accepted(self):
        executor = BlockingExecutor({"response": "ok"})
        controller = ConversationController(ClientConfig(endpoint=ENDPOINT), executor=executor)

        tasks = [
            asyncio.create_task(controller.submit("a")),
            asyncio.create_task(controller.submit("b")),
        ]
        await asyncio.sleep(0)
        executor.release.set()
        results = await asyncio.gather(*tasks)

        assert sorted(results) == [False, True]
        assert len(controller.messages) == 3
    
    @pytest.mark.asyncio
    async def test_rejection_logged(self, controller):
        with patch("src.orchestrator.controller.logger") as mock_logger:
            await controller.submit("   ")
        
        mock_logger.info.assert_called_with("turn_rejected", reason="empty_input")


class TestTurnResolution:
    """Test that every accepted turn resolves to exactly one bot message."""
    
    @pytest.mark.asyncio
    async def test_request_failure_absorbed(self):
        executor = AsyncMock(spec=ResilientExecutor)
        executor.execute.side_effect = RequestFailure(attempts=3)
        controller = ConversationController(ClientConfig(endpoint=ENDPOINT), executor=executor)
        
        accepted = await controller.submit("help")
        
        assert accepted is True
        assert controller.messages[-1].category == MessageCategory.CRISIS
        assert controller.pending is False
    
    @pytest.mark.asyncio
    async def test_unexpected_error_resolves_to_fallback(self):
        executor = AsyncMock(spec=ResilientExecutor)
        executor.execute.side_effect = RuntimeError("boom")
        controller = ConversationController(ClientConfig(endpoint=ENDPOINT), executor=executor)
        
        accepted = await controller.submit("help")
        
        assert accepted is True
        assert controller.messages[-1].text == CRISIS_FALLBACK_TEXT
        assert controller.pending is False
    
    @pytest.mark.asyncio
    async def test_cancelled_turn_still_resolves(self):
        executor = BlockingExecutor({"response": "never"})
        controller = ConversationController(ClientConfig(endpoint=ENDPOINT), executor=executor)
        
        task = asyncio.create_task(controller.submit("slow"))
        await asyncio.sleep(0)
        task.cancel()
        
        with pytest.raises(asyncio.CancelledError):
            await task
        
        assert controller.pending is False
        assert len(controller.messages) == 3
        assert controller.messages[-1].category == MessageCategory.CRISIS
    
    @pytest.mark.asyncio
    async def test_bot_message_appended_before_pending_cleared(self):
        observed = []
        executor = AsyncMock(spec=ResilientExecutor)
        executor.execute.return_value = {"response": "ok"}
        controller = ConversationController(ClientConfig(endpoint=ENDPOINT), executor=executor)

        def record(message):
            observed.append((message.sender, controller.pending))

        with patch.object(controller._store, "append", side_effect=record):
            await controller.submit("hi")

        assert observed == [(Sender.USER, False), (Sender.BOT, True)]
        assert controller.pending is False


class TestState:
    """Test the renderer-facing state."""
    
    def test_initial_state(self):
        controller = ConversationController(ClientConfig(endpoint=ENDPOINT))
        
        state = controller.state()
        
        assert state.pending is False
        assert len(state.messages) == 1
        assert state.messages[0].category == MessageCategory.INITIAL
    
    def test_state_is_immutable(self):
        controller = ConversationController(ClientConfig(endpoint=ENDPOINT))
        state = controller.state()
        
        with pytest.raises(AttributeError):
            state.pending = True
