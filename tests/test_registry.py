"""Tests for the provider registry."""

import threading

import pytest
from conftest import TEST_KEY
from reviewgate.errors import BusinessError, NotFoundError, ValidationError
from reviewgate.models import ProviderKind
from reviewgate.registry import ProviderRepository, ProviderService
from reviewgate.storage import Database, ProviderRecord
from reviewgate.vault import Vault


def _gemini(name: str = "Gemini", **overrides) -> dict:
  data = {"name": name, "kind": "gemini", "api_key": "gm-secret-key-123"}
  data.update(overrides)
  return data


def _active_ids(service: ProviderService) -> list[str]:
  return [p.id for p in service.get_all() if p.is_active]


class TestCreate:
  def test_key_is_stored_encrypted(self, service, repository, vault) -> None:
    item = service.create(_gemini())
    record = repository.find_by_id(item.id)

    assert record.encrypted_api_key != "gm-secret-key-123"
    assert "gm-secret-key-123" not in record.encrypted_api_key
    assert vault.decrypt(record.encrypted_api_key) == "gm-secret-key-123"

  def test_password_is_hashed(self, service, repository) -> None:
    item = service.create(_gemini(password="abcdef"))
    record = repository.find_by_id(item.id)

    assert item.is_password_gated
    assert record.password_hash != "abcdef"
    assert service.verify_password(item.id, "abcdef")
    assert not service.verify_password(item.id, "abcdeg")

  def test_new_records_start_inactive(self, service) -> None:
    item = service.create(_gemini())
    assert not item.is_active
    assert service.get_active() is None

  def test_list_item_has_no_secrets(self, service) -> None:
    item = service.create(_gemini(password="abcdef"))
    data = item.to_dict()

    assert "gm-secret-key-123" not in str(data)
    assert "abcdef" not in str(data)
    assert data["hasPassword"] is True
    assert data["provider"] == "gemini"

  def test_blank_password_means_no_gate(self, service) -> None:
    assert not service.create(_gemini(password="")).is_password_gated

  def test_blank_optional_fields_are_absent(self, service) -> None:
    item = service.create(_gemini(model="  ", endpoint=""))
    assert item.model is None
    assert item.endpoint is None

  @pytest.mark.parametrize("overrides", [
    {"name": ""},
    {"name": "x" * 101},
    {"api_key": ""},
    {"kind": "openai"},
    {"password": "abc"},
    {"endpoint": "ftp://example.com"},
    {"unexpected": "field"},
  ])
  def test_invalid_input(self, service, overrides) -> None:
    with pytest.raises(ValidationError):
      service.create(_gemini(**overrides))

  def test_azure_requires_endpoint_and_deployment(self, service) -> None:
    with pytest.raises(ValidationError, match="endpoint"):
      service.create({"name": "Azure", "kind": "azure-openai", "api_key": "k"})

  def test_validation_error_hides_secrets(self, service) -> None:
    with pytest.raises(ValidationError) as exc_info:
      service.create(_gemini(password="abc"))
    assert "abc" not in exc_info.value.message


class TestUpdate:
  def test_omitted_fields_unchanged(self, service, repository) -> None:
    item = service.create(_gemini(model="gemini-1.5-pro", password="abcdef"))
    before = repository.find_by_id(item.id)

    updated = service.update(item.id, {"name": "Renamed"})
    after = repository.find_by_id(item.id)

    assert updated.name == "Renamed"
    assert updated.model == "gemini-1.5-pro"
    assert after.encrypted_api_key == before.encrypted_api_key
    assert after.password_hash == before.password_hash

  def test_null_or_empty_clears_optional_fields(self, service) -> None:
    item = service.create(_gemini(model="gemini-1.5-pro", endpoint="https://proxy.example.com"))

    updated = service.update(item.id, {"model": None, "endpoint": ""})

    assert updated.model is None
    assert updated.endpoint is None

  def test_new_api_key_is_re_encrypted(self, service, repository, vault) -> None:
    item = service.create(_gemini())
    old = repository.find_by_id(item.id).encrypted_api_key

    service.update(item.id, {"api_key": "gm-rotated-key"})
    record = repository.find_by_id(item.id)

    assert record.encrypted_api_key != old
    assert vault.decrypt(record.encrypted_api_key) == "gm-rotated-key"

  def test_empty_password_clears_gate(self, service) -> None:
    item = service.create(_gemini(password="abcdef"))
    assert not service.update(item.id, {"password": ""}).is_password_gated

  def test_new_password_is_re_hashed(self, service) -> None:
    item = service.create(_gemini(password="abcdef"))
    service.update(item.id, {"password": "zyxwvu"})

    assert service.verify_password(item.id, "zyxwvu")
    assert not service.verify_password(item.id, "abcdef")

  def test_short_password_rejected(self, service) -> None:
    item = service.create(_gemini())
    with pytest.raises(ValidationError):
      service.update(item.id, {"password": "abc"})

  def test_name_cannot_be_cleared(self, service) -> None:
    item = service.create(_gemini())
    with pytest.raises(ValidationError):
      service.update(item.id, {"name": None})

  def test_unknown_id(self, service) -> None:
    with pytest.raises(NotFoundError) as exc_info:
      service.update("missing", {"name": "x"})
    assert exc_info.value.code == "AI_PROVIDER_NOT_FOUND"

  def test_clearing_azure_deployment_rejected(self, service, repository) -> None:
    item = service.create({
      "name": "Azure",
      "kind": "azure-openai",
      "api_key": "k",
      "endpoint": "https://x.openai.azure.com",
      "deployment": "gpt-4o",
    })

    with pytest.raises(ValidationError, match="deployment"):
      service.update(item.id, {"deployment": None})
    assert repository.find_by_id(item.id).deployment == "gpt-4o"

  def test_switching_to_azure_requires_fields(self, service) -> None:
    item = service.create(_gemini())

    with pytest.raises(ValidationError, match="endpoint, deployment"):
      service.update(item.id, {"kind": "azure-openai"})
    assert service.get_by_id(item.id).kind == ProviderKind.GEMINI

  def test_switching_to_azure_with_fields(self, service) -> None:
    item = service.create(_gemini())
    updated = service.update(item.id, {
      "kind": "azure-openai",
      "endpoint": "https://x.openai.azure.com",
      "deployment": "gpt-4o",
    })
    assert updated.kind == ProviderKind.AZURE_OPENAI


class TestDelete:
  def test_delete_inactive(self, service) -> None:
    item = service.create(_gemini())
    service.delete(item.id)

    with pytest.raises(NotFoundError):
      service.get_by_id(item.id)

  def test_delete_active_fails(self, service) -> None:
    item = service.create(_gemini())
    service.set_active(item.id)

    with pytest.raises(BusinessError) as exc_info:
      service.delete(item.id)
    assert exc_info.value.code == "AI_PROVIDER_DELETE_FAILED"
    assert service.get_by_id(item.id).is_active

  def test_delete_unknown(self, service) -> None:
    with pytest.raises(NotFoundError):
      service.delete("missing")

  def test_activated_just_before_delete(self, service, repository, monkeypatch) -> None:
    current = service.create(_gemini("A"))
    target = service.create(_gemini("B"))
    service.set_active(current.id)
    delete = repository.delete

    def activate_then_delete(provider_id: str):
      repository.set_active(provider_id)
      return delete(provider_id)

    monkeypatch.setattr(repository, "delete", activate_then_delete)

    with pytest.raises(BusinessError) as exc_info:
      service.delete(target.id)
    assert exc_info.value.code == "AI_PROVIDER_DELETE_FAILED"
    assert service.get_active().id == target.id
    assert len(service.get_all()) == 2


class TestSetActive:
  def test_single_active_after_any_sequence(self, service) -> None:
    ids = [service.create(_gemini(f"P{i}")).id for i in range(4)]

    for provider_id in [ids[0], ids[2], ids[2], ids[1], ids[3], ids[0]]:
      service.set_active(provider_id)
      assert _active_ids(service) == [provider_id]
      assert service.get_active().id == provider_id

  def test_active_listed_first(self, service) -> None:
    first = service.create(_gemini("First"))
    service.create(_gemini("Second"))
    service.set_active(first.id)

    assert service.get_all()[0].id == first.id

  def test_unknown_id_keeps_current_active(self, service) -> None:
    item = service.create(_gemini())
    service.set_active(item.id)

    with pytest.raises(NotFoundError):
      service.set_active("missing")
    assert _active_ids(service) == [item.id]

  @pytest.mark.parametrize("in_memory", [False, True], ids=["file", "memory"])
  def test_concurrent_activation(self, tmp_path, in_memory) -> None:
    db = Database("sqlite:///:memory:" if in_memory else f"sqlite:///{tmp_path / 'providers.db'}")
    db.create_all()
    vault = Vault(TEST_KEY, iterations=1000)
    service = ProviderService(ProviderRepository(db, vault), vault)
    ids = [service.create(_gemini(f"P{i}")).id for i in range(5)]
    service.set_active(ids[0])

    violations: list[int] = []
    stop = threading.Event()

    def activate(provider_id: str) -> None:
      for _ in range(20):
        service.set_active(provider_id)

    def observe() -> None:
      while not stop.is_set():
        count = len(_active_ids(service))
        if count != 1:
          violations.append(count)

    observer = threading.Thread(target=observe)
    observer.start()
    workers = [threading.Thread(target=activate, args=(pid,)) for pid in ids]
    for t in workers:
      t.start()
    for t in workers:
      t.join()
    stop.set()
    observer.join()

    assert violations == []
    assert len(_active_ids(service)) == 1
    db.dispose()


class TestLookup:
  def test_find_record_defaults_to_active(self, service) -> None:
    service.create(_gemini("Idle"))
    active = service.create(_gemini("Active"))
    service.set_active(active.id)

    record = service.find_record(None)
    assert isinstance(record, ProviderRecord)
    assert record.id == active.id

  def test_find_record_without_active(self, service) -> None:
    service.create(_gemini())
    assert service.find_record(None) is None

  def test_get_credentials_decrypts(self, service) -> None:
    item = service.create(_gemini(model="gemini-1.5-pro"))
    credentials = service.get_credentials(service.find_record(item.id))

    assert credentials.api_key == "gm-secret-key-123"
    assert credentials.model == "gemini-1.5-pro"
    assert "gm-secret-key-123" not in repr(credentials)

  def test_verify_password_unknown_provider(self, service) -> None:
    assert not service.verify_password("missing", "abcdef")

  def test_kind_round_trips(self, service) -> None:
    item = service.create({
      "name": "Azure",
      "kind": "azure-openai",
      "api_key": "k",
      "endpoint": "https://x.openai.azure.com",
      "deployment": "gpt-4o",
    })
    assert service.get_by_id(item.id).kind == ProviderKind.AZURE_OPENAI
