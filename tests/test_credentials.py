import pytest

from newsflow.errors import ConfigurationError
from newsflow.models import User
from newsflow.services.credentials import CredentialResolver, ProviderKind


def _user(**keys) -> User:
    return User(id=1, username="reader", **keys)


def test_user_key_takes_precedence() -> None:
    resolver = CredentialResolver(news_api_key="default-news", gemini_api_key="default-gemini")
    user = _user(news_api_key="mine", gemini_api_key="my-gemini")

    assert resolver.resolve(user, ProviderKind.NEWS) == "mine"
    assert resolver.resolve(user, ProviderKind.GEMINI) == "my-gemini"


def test_blank_user_key_falls_back_to_default() -> None:
    resolver = CredentialResolver(news_api_key="default-news")

    assert resolver.resolve(_user(news_api_key="   "), ProviderKind.NEWS) == "default-news"
    assert resolver.resolve(None, ProviderKind.NEWS) == "default-news"


def test_missing_key_raises_configuration_error() -> None:
    resolver = CredentialResolver(news_api_key="default-news")

    with pytest.raises(ConfigurationError) as excinfo:
        resolver.resolve(_user(), ProviderKind.GEMINI)

    assert excinfo.value.status_code == 400
    assert "profile settings" in excinfo.value.message
