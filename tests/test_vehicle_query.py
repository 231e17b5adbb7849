import pytest

from errors import BackendUnavailable
from vehicle_query import correct_make, fetch_models, fetch_trims, list_vehicle_options


@pytest.mark.parametrize("make, expected", [("vw", "Volkswagen"), (" VW ", "Volkswagen"), ("Chevy", "Chevrolet")])
def test_correct_make_static_alias_skips_backend(make_backend, make, expected):
    backend = make_backend()
    assert correct_make(backend, make) == expected
    assert backend.calls == []


def test_correct_make_short_input_unchanged(make_backend):
    backend = make_backend()
    assert correct_make(backend, "s") == "s"
    assert backend.calls == []


def test_correct_make_uses_backend(make_backend):
    backend = make_backend('```json\n{"correctedMake": "Subaru"}\n```')
    assert correct_make(backend, "Suburu") == "Subaru"
    assert backend.calls[0]["schema"]["required"] == ["correctedMake"]


@pytest.mark.parametrize("response", [BackendUnavailable("down"), "garbage", '{"correctedMake": ""}', RuntimeError("boom")])
def test_correct_make_failure_returns_input(make_backend, response):
    assert correct_make(make_backend(response), "Suburu") == "Suburu"


def test_list_vehicle_options_dedupes_and_cleans(make_backend):
    backend = make_backend(
        'Here you go: {"options": ["Outback", "Forester", "outback", "", "Crosstrek", '
        '"Used Outback for sale", "Note: prices vary", "Forester "]}'
    )
    assert list_vehicle_options(backend, "models for 2021 Subaru") == ["Outback", "Forester", "Crosstrek"]


def test_list_vehicle_options_caps_results(make_backend):
    options = ", ".join(f'"Trim {i}"' for i in range(80))
    backend = make_backend('{"options": [%s]}' % options)
    result = list_vehicle_options(backend, "trims for 2021 Ford F-150", limit=50)
    assert len(result) == 50
    assert result[0] == "Trim 0"


@pytest.mark.parametrize("response", [BackendUnavailable("down"), "no json", '{"options": "Outback"}'])
def test_list_vehicle_options_failure_returns_empty(make_backend, response):
    assert list_vehicle_options(make_backend(response), "models for Subaru") == []


@pytest.mark.parametrize("make", ["", "Ki", "  VW  "])
def test_fetch_models_short_make_skips_backend(make_backend, make):
    backend = make_backend()
    assert fetch_models(backend, "2021", make) == []
    assert backend.calls == []


def test_fetch_models_builds_query(make_backend):
    backend = make_backend('{"options": ["Outback"]}')
    assert fetch_models(backend, 2021, "Subaru") == ["Outback"]
    assert '"models for 2021 Subaru"' in backend.calls[0]["prompt"]


def test_fetch_models_without_year(make_backend):
    backend = make_backend('{"options": ["Outback"]}')
    fetch_models(backend, None, "Subaru")
    assert '"models for Subaru"' in backend.calls[0]["prompt"]


def test_fetch_trims(make_backend):
    backend = make_backend('{"options": ["Premium", "Limited"]}')
    assert fetch_trims(backend, "2021", "Subaru", "Outback") == ["Premium", "Limited"]
    assert '"trims for 2021 Subaru Outback"' in backend.calls[0]["prompt"]


@pytest.mark.parametrize("make, model", [("", "Outback"), ("Subaru", "Ou"), ("Subaru", "")])
def test_fetch_trims_short_input_skips_backend(make_backend, make, model):
    backend = make_backend()
    assert fetch_trims(backend, "2021", make, model) == []
    assert backend.calls == []
