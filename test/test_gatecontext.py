from pathlib import Path

import pytest

from triggergate.gatecontext import GateContext
from triggergate.github import GitHub


@pytest.fixture(autouse=True)
def isolated(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv('XDG_CONFIG_HOME', str(tmp_path / 'xdg'))
    for variable in ('TRIGGER_GATE_CONFIG', 'GITHUB_TOKEN', 'GITHUB_API_URL'):
        monkeypatch.delenv(variable, raising=False)


async def test_builtin_config() -> None:
    async with GateContext() as context:
        assert isinstance(context.forge, GitHub)
        assert str(context.forge.api) == 'https://api.github.com'
        assert context.forge.session.headers['User-Agent'] == 'trigger-gate'
        assert 'Authorization' not in context.forge.session.headers


async def test_runner_environment() -> None:
    environ = {
        'GITHUB_API_URL': 'https://ghe.example.com/api/v3',
        'GITHUB_TOKEN': ' ghs_enterprise_secret\n',
    }
    async with GateContext(environ=environ) as context:
        assert isinstance(context.forge, GitHub)
        # the runner's token goes to the runner's API, never to github.com
        assert str(context.forge.api) == 'https://ghe.example.com/api/v3'
        assert context.forge.session.headers['Authorization'] == 'token ghs_enterprise_secret'


async def test_runner_environment_from_os(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv('GITHUB_API_URL', 'https://ghe.example.com/api/v3')
    monkeypatch.setenv('GITHUB_TOKEN', 'ghs_fromenv')
    async with GateContext() as context:
        assert isinstance(context.forge, GitHub)
        assert str(context.forge.api) == 'https://ghe.example.com/api/v3'
        assert context.forge.session.headers['Authorization'] == 'token ghs_fromenv'


async def test_config_beats_runner_environment(tmp_path: Path) -> None:
    config_file = tmp_path / 'config.toml'
    config_file.write_text('[github]\napi-url = "https://github.example.com/api/v3"\ntoken = "tok_config"\n')
    environ = {
        'GITHUB_API_URL': 'https://ghe.example.com/api/v3',
        'GITHUB_TOKEN': 'ghs_runner',
    }
    async with GateContext(config_file, environ) as context:
        assert isinstance(context.forge, GitHub)
        assert str(context.forge.api) == 'https://github.example.com/api/v3'
        assert context.forge.session.headers['Authorization'] == 'token tok_config'


async def test_empty_runner_variables() -> None:
    async with GateContext(environ={'GITHUB_API_URL': '', 'GITHUB_TOKEN': ''}) as context:
        assert isinstance(context.forge, GitHub)
        assert str(context.forge.api) == 'https://api.github.com'
        assert 'Authorization' not in context.forge.session.headers


async def test_config_file(tmp_path: Path) -> None:
    config_file = tmp_path / 'config'
    config_file.write_text('''
        [github]
        api-url = "https://github.example.com/api/v3"
        token = [{file="./github-token"}]
    ''')
    (tmp_path / 'github-token').write_text('tok_ABCDEFG\n')

    async with GateContext(config_file) as context:
        assert isinstance(context.forge, GitHub)
        assert str(context.forge.api) == 'https://github.example.com/api/v3'
        assert context.forge.session.headers['Authorization'] == 'token tok_ABCDEFG'
        # untouched built-in values survive the merge
        assert context.forge.session.headers['User-Agent'] == 'trigger-gate'


async def test_config_from_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config_file = tmp_path / 'env.toml'
    config_file.write_text('[github]\nuser-agent = "from-env"\n')
    monkeypatch.setenv('TRIGGER_GATE_CONFIG', str(config_file))

    async with GateContext() as context:
        assert isinstance(context.forge, GitHub)
        assert context.forge.session.headers['User-Agent'] == 'from-env'


async def test_user_config(tmp_path: Path) -> None:
    user_config = tmp_path / 'xdg' / 'trigger-gate' / 'config.toml'
    user_config.parent.mkdir(parents=True)
    user_config.write_text('[github]\ntoken = "tok_user"\n')

    async with GateContext() as context:
        assert isinstance(context.forge, GitHub)
        assert context.forge.session.headers['Authorization'] == 'token tok_user'


def test_missing_config_file(tmp_path: Path) -> None:
    with pytest.raises(SystemExit, match='No such file'):
        GateContext(tmp_path / 'nope.toml')


def test_broken_config_file(tmp_path: Path) -> None:
    config_file = tmp_path / 'broken.toml'
    config_file.write_text('[github\n')
    with pytest.raises(SystemExit, match='broken.toml'):
        GateContext(config_file)


def test_missing_token_file(tmp_path: Path) -> None:
    config_file = tmp_path / 'config.toml'
    config_file.write_text('[github]\ntoken = [{file="missing-token"}]\n')
    with pytest.raises(SystemExit, match='missing-token'):
        GateContext(config_file)


def test_github_not_a_table(tmp_path: Path) -> None:
    config_file = tmp_path / 'config.toml'
    config_file.write_text('github = "yes"\n')
    with pytest.raises(SystemExit, match="Configuration error: attribute 'github': must have type dict"):
        GateContext(config_file)


async def test_invalid_setting(tmp_path: Path) -> None:
    config_file = tmp_path / 'config.toml'
    config_file.write_text('[github]\napi-url = 42\n')
    message = "Configuration error: attribute 'github': attribute 'api-url': must have type str"
    with pytest.raises(SystemExit, match=message):
        async with GateContext(config_file):
            pass
