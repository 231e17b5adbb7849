import pytest

import llm_interface
from errors import BackendUnavailable
from llm_interface import LangChainBackend


class FakeMessage:
    def __init__(self, content):
        self.content = content


class FakeLLM:
    def __init__(self, *results):
        self.results = list(results)
        self.inputs = []

    def invoke(self, value, **kwargs):
        self.inputs.append((value, kwargs))
        result = self.results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture
def patch_llm(monkeypatch):
    def install(llm):
        seen = {}

        def fake_init(model_name, schema=None, temperature=None):
            seen.update(model_name=model_name, schema=schema, temperature=temperature)
            return llm

        monkeypatch.setattr(llm_interface, "initialize_llm_with_model", fake_init)
        return seen

    return install


def test_unsupported_model_name():
    with pytest.raises(ValueError):
        LangChainBackend("gpt-4o")


def test_gemini_text_request(patch_llm):
    llm = FakeLLM(FakeMessage('{"options": []}'))
    seen = patch_llm(llm)
    backend = LangChainBackend("gemini-2.5-flash", retries=0)
    assert backend.generate("prompt", schema={"type": "object"}, temperature=0.0) == '{"options": []}'
    assert seen == {"model_name": "gemini-2.5-flash", "schema": {"type": "object"}, "temperature": 0.0}
    assert llm.inputs[0][0] == "prompt"


def test_gemini_image_request_sends_data_url(patch_llm):
    llm = FakeLLM(FakeMessage([{"type": "text", "text": "1HGCM82633A004352"}]))
    patch_llm(llm)
    result = LangChainBackend("gemini-2.5-flash").generate("read the vin", image=b"abc")
    assert result == "1HGCM82633A004352"
    message = llm.inputs[0][0][0]
    assert message.content[1]["image_url"] == "data:image/jpeg;base64,YWJj"


def test_ollama_image_request(patch_llm):
    llm = FakeLLM("NOT_FOUND")
    patch_llm(llm)
    assert LangChainBackend("llama3.2").generate("read the vin", image=b"abc") == "NOT_FOUND"
    assert llm.inputs[0][1] == {"images": ["YWJj"]}


def test_failures_become_backend_unavailable(patch_llm):
    patch_llm(FakeLLM(ConnectionError("reset"), ConnectionError("reset")))
    with pytest.raises(BackendUnavailable):
        LangChainBackend("gemini-2.5-flash", retries=1, retry_delay=0).generate("prompt")


def test_retry_recovers(patch_llm):
    llm = FakeLLM(TimeoutError("slow"), FakeMessage("ok"))
    patch_llm(llm)
    assert LangChainBackend("gemini-2.5-flash", retries=1, retry_delay=0).generate("prompt") == "ok"
    assert len(llm.inputs) == 2


def test_no_retry_by_default(patch_llm, monkeypatch):
    monkeypatch.setattr(llm_interface.settings, "LLM_MAX_RETRIES", 0)
    llm = FakeLLM(TimeoutError("slow"), FakeMessage("ok"))
    patch_llm(llm)
    with pytest.raises(BackendUnavailable):
        LangChainBackend("gemini-2.5-flash").generate("prompt")
    assert len(llm.inputs) == 1


def test_initialization_failure(monkeypatch):
    def broken_init(model_name, schema=None, temperature=None):
        raise ValueError("API key required")

    monkeypatch.setattr(llm_interface, "initialize_llm_with_model", broken_init)
    with pytest.raises(BackendUnavailable):
        LangChainBackend("gemini-2.5-flash").generate("prompt")


def test_client_is_reused_per_schema_and_temperature(monkeypatch):
    built = []

    def counting_init(model_name, schema=None, temperature=None):
        built.append((schema, temperature))
        return FakeLLM(FakeMessage("a"), FakeMessage("b"), FakeMessage("c"))

    monkeypatch.setattr(llm_interface, "initialize_llm_with_model", counting_init)
    backend = LangChainBackend("gemini-2.5-flash")
    backend.generate("first", schema={"type": "object"}, temperature=0.0)
    backend.generate("second", schema={"type": "object"}, temperature=0.0)
    assert len(built) == 1

    backend.generate("third", schema={"type": "object"}, temperature=0.2)
    backend.generate("fourth")
    assert built[1:] == [({"type": "object"}, 0.2), (None, None)]
