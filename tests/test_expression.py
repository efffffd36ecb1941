import pytest

from chartplan.errors import InvalidExpressionError, UnknownIntegrationError
from chartplan.expression import And, ExpressionEvaluator, Name, Not, Or, parse_expression


@pytest.fixture
def evaluator(integration_names) -> ExpressionEvaluator:
    return ExpressionEvaluator(integration_names)


def test_and_binds_tighter_than_or():
    assert parse_expression("acs || quay && nexus") == Or(
        Name("acs"), And(Name("quay"), Name("nexus"))
    )


def test_parentheses_and_negation():
    assert parse_expression("!(acs || quay) && nexus") == And(
        Not(Or(Name("acs"), Name("quay"))), Name("nexus")
    )


def test_keyword_operators():
    assert parse_expression("acs and not quay or nexus") == parse_expression(
        "acs && !quay || nexus"
    )


@pytest.mark.parametrize(
    "expression, expected",
    [
        ("acs", True),
        ("quay", False),
        ("acs && github", True),
        ("acs && quay", False),
        ("quay || github", True),
        ("!quay", True),
        ("!!acs", True),
        ("acs && (github || gitlab || bitbucket)", True),
        ("(quay || nexus || artifactory) && acs", False),
    ],
)
def test_evaluate(evaluator, expression, expected):
    variables = {"acs": True, "github": True, "quay": False}
    assert evaluator.evaluate(expression, variables) is expected


def test_unbound_names_are_false(evaluator):
    assert evaluator.evaluate("jenkins", {}) is False


def test_evaluation_is_pure(evaluator):
    variables = {"acs": True}
    assert evaluator.evaluate("acs && !quay", variables)
    assert evaluator.evaluate("acs && !quay", variables)
    assert variables == {"acs": True}


def test_names_in_keeps_order_of_appearance(evaluator):
    assert evaluator.names_in("acs && (github || gitlab) && !acs") == ["acs", "github", "gitlab"]


@pytest.mark.parametrize(
    "expression, message",
    [
        ("", "empty expression"),
        ("   ", "empty expression"),
        ("acs &&", "unexpected end of expression"),
        ("(acs || quay", "missing closing parenthesis"),
        ("acs quay", "unexpected 'quay'"),
        ("acs & quay", "unexpected character '&'"),
        ("acs || )", "unexpected '\\)'"),
    ],
)
def test_malformed_expression_raises(evaluator, expression, message):
    with pytest.raises(InvalidExpressionError, match=message):
        evaluator.evaluate(expression, {})


def test_unknown_integration_raises(evaluator):
    with pytest.raises(UnknownIntegrationError) as excinfo:
        evaluator.evaluate("acs && sonarqube", {"acs": True})

    assert excinfo.value.integration == "sonarqube"
    assert excinfo.value.expression == "acs && sonarqube"


def test_names_with_dashes():
    evaluator = ExpressionEvaluator(["github-app", "quay"])
    assert evaluator.evaluate("github-app && !quay", {"github-app": True})
