from test.base import does_not_raise

from pytest import mark, param, raises

from aibs_informatics_ecr_login.exceptions import NotECRHostError, RegistryError
from aibs_informatics_ecr_login.registry import Registry, extract_registry


@mark.parametrize(
    "server_url,expected,raise_expectation",
    [
        param(
            "123456789012.dkr.ecr.us-west-2.amazonaws.com",
            Registry(id="123456789012", fips=False, region="us-west-2"),
            does_not_raise(),
            id="hostname",
        ),
        param(
            "https://123456789012.dkr.ecr.us-west-2.amazonaws.com",
            Registry(id="123456789012", fips=False, region="us-west-2"),
            does_not_raise(),
            id="https scheme stripped",
        ),
        param(
            "https://123456789012.dkr.ecr-fips.us-east-1.amazonaws.com",
            Registry(id="123456789012", fips=True, region="us-east-1"),
            does_not_raise(),
            id="fips",
        ),
        param(
            "123456789012.dkr.ecr.cn-north-1.amazonaws.com.cn",
            Registry(id="123456789012", fips=False, region="cn-north-1"),
            does_not_raise(),
            id="china partition",
        ),
        param(
            "https://123456789012.dkr.ecr.us-west-2.amazonaws.com/my-repo:latest",
            Registry(id="123456789012", fips=False, region="us-west-2"),
            does_not_raise(),
            id="with repository path",
        ),
        param(
            "my_registry-1.dkr.ecr.us-gov-west-1.amazonaws.com",
            Registry(id="my_registry-1", fips=False, region="us-gov-west-1"),
            does_not_raise(),
            id="underscore and hyphen in id",
        ),
        param("docker.io", None, raises(NotECRHostError), id="docker hub"),
        param(
            "http://123456789012.dkr.ecr.us-west-2.amazonaws.com",
            None,
            raises(NotECRHostError),
            id="other scheme not stripped",
        ),
        param(
            "123456789012.dkr.ecr.amazonaws.com",
            None,
            raises(NotECRHostError),
            id="missing region",
        ),
        param(
            "-123456789012.dkr.ecr.us-west-2.amazonaws.com",
            None,
            raises(NotECRHostError),
            id="id must start alphanumeric",
        ),
        param("", None, raises(NotECRHostError), id="empty"),
    ],
)
def test__extract_registry(server_url, expected, raise_expectation):
    with raise_expectation:
        actual = extract_registry(server_url)

    if expected:
        assert actual == expected


@mark.parametrize(
    "hostname",
    [
        param("123456789012.dkr.ecr.eu-central-1.amazonaws.com", id="standard"),
        param("123456789012.dkr.ecr-fips.us-gov-east-1.amazonaws.com", id="fips"),
    ],
)
def test__extract_registry__ignores_scheme_and_partition_suffix(hostname):
    expected = extract_registry(hostname)

    assert extract_registry(f"https://{hostname}") == expected
    assert extract_registry(f"{hostname}.cn") == expected
    assert extract_registry(f"https://{hostname}.cn") == expected


def test__extract_registry__error_mentions_ecr():
    with raises(RegistryError, match="Amazon Elastic Container Registry"):
        extract_registry("ghcr.io/some/image")


def test__Registry__is_immutable():
    registry = Registry(id="123456789012", fips=False, region="us-west-2")
    with raises(AttributeError):
        registry.region = "us-east-1"  # type: ignore[misc]
