from pytest_archon import archrule


def test_domain_independence() -> None:
    """
    Domain records and validation are the foundation.
    They must not import the engine, adapters, or any I/O library.
    """
    (
        archrule("domain_is_independent")
        .match("notification_engine.domain*")
        .should_not_import("notification_engine.persistence*")
        .should_not_import("notification_engine.channels*")
        .should_not_import("notification_engine.scheduling*")
        .should_not_import("notification_engine.service")
        .should_not_import("sqlalchemy*")
        .should_not_import("httpx*")
        .should_not_import("aiosmtplib*")
        .check("notification_engine")
    )


def test_ports_layering() -> None:
    """
    Ports (interfaces) should not depend on Adapters (implementations).
    """
    (
        archrule("ports_layering")
        .match("notification_engine.ports*")
        .should_not_import("notification_engine.persistence*")
        .should_not_import("notification_engine.memory*")
        .should_not_import("notification_engine.channels*")
        .check("notification_engine")
    )


def test_persistence_layering() -> None:
    """
    Persistence implements the store ports and knows nothing of dispatch.
    """
    (
        archrule("persistence_layering")
        .match("notification_engine.persistence*")
        .should_not_import("notification_engine.channels*")
        .should_not_import("notification_engine.scheduling*")
        .should_not_import("notification_engine.service")
        .should_not_import("httpx*")
        .should_not_import("aiosmtplib*")
        .check("notification_engine")
    )


def test_template_isolation() -> None:
    """
    Rendering is pure: no storage and no transports.
    """
    (
        archrule("template_isolation")
        .match("notification_engine.template*")
        .should_not_import("notification_engine.persistence*")
        .should_not_import("notification_engine.channels*")
        .should_not_import("sqlalchemy*")
        .check("notification_engine")
    )
