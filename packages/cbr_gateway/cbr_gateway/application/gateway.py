"""Schema-driven RPC gateway.

A call is built in two steps, a schema selection and a method selection,
and executed lazily by a materialization call::

    gateway = CBRGateway()
    fragment = (
        gateway.market()
        .select_method("DirRepoAuctionParam", {"DateFrom": "01.02.2014", "DateTo": "15.09.2015"})
        .as_xml_fragment()
    )

The method's parameter contract is discovered from the schema's type
metadata, arguments are validated against it and ``dateTime`` parameters are
normalized before the single remote call. The raw result is memoized, so
every representation of one invocation is rendered from the same response.
"""

from __future__ import annotations

import logging
import threading
import time
import traceback
from collections.abc import Mapping
from datetime import date, datetime
from typing import Any

from lxml import etree
from pydantic import ValidationError

from cbr_gateway.config import GatewayConfig, get_config
from cbr_gateway.domain.entities import MethodContract, PendingInvocation
from cbr_gateway.domain.enums import ParameterType, SchemaName
from cbr_gateway.domain.exceptions import (
    ArityMismatchError,
    CBRGatewayError,
    EmptyResultError,
    MissingParameterError,
    NoMethodSelectedError,
    NoSchemaSelectedError,
    RemoteCallError,
    XmlExtractionError,
)
from cbr_gateway.domain.interfaces import RemoteClientFactory
from cbr_gateway.domain.services.date_coercion import coerce_date, resolve_date
from cbr_gateway.infrastructure.logging import get_logger, log_call_event
from cbr_gateway.infrastructure.monitoring import GatewayMetricsCollector
from cbr_gateway.infrastructure.soap import make_zeep_client_factory

from .models import CurrencyRate
from .services import ConnectionCache, ContractDiscovery, SchemaRegistry, extract_xml_fragment

logger = get_logger(__name__)

COURSES_METHOD = "GetCursOnDate"
COURSES_DATE_PARAMETER = "On_date"
COURSES_DATA_TAG = "ValuteData"
COURSES_ROW_TAG = "ValuteCursOnDate"


def _is_date_time(type_name: str) -> bool:
    return type_name.rsplit(":", 1)[-1] == ParameterType.DATE_TIME.value


class SchemaGateway:
    """Dispatches calls to any method of any registered schema.

    One instance is one logical session: the selected schema, the pending
    invocation and its memoized result belong to the instance. The connection
    and contract caches are thread-safe and can be shared between sessions,
    see :meth:`session`.
    """

    def __init__(
        self,
        config: GatewayConfig | None = None,
        registry: SchemaRegistry | None = None,
        client_factory: RemoteClientFactory | None = None,
        logger: logging.Logger | None = None,
        *,
        connections: ConnectionCache | None = None,
        contracts: ContractDiscovery | None = None,
        metrics: GatewayMetricsCollector | None = None,
    ) -> None:
        """Initialize the gateway.

        Args:
            config: Gateway configuration; the global configuration if None
            registry: Schema registry; built from ``config`` if None
            client_factory: Opens remote clients; zeep clients if None
            logger: Sink for call lifecycle lines; the module logger if None
            connections: Existing connection cache to share
            contracts: Existing contract discovery to share
            metrics: Metrics collector
        """
        self._config = config or get_config()
        self._metrics = metrics or GatewayMetricsCollector(enabled=self._config.enable_metrics)

        if connections is None:
            connections = ConnectionCache(
                registry or SchemaRegistry.from_config(self._config),
                client_factory or make_zeep_client_factory(self._config),
                self._metrics,
            )
        self._connections = connections
        self._contracts = contracts or ContractDiscovery(connections, self._metrics)
        self._logger = logger if logger is not None else get_logger(__name__)

        self._current_schema: str | None = None
        self._pending: PendingInvocation | None = None
        self._raw_result: Any = None
        self._executed = False
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def config(self) -> GatewayConfig:
        """Gateway configuration."""
        return self._config

    @property
    def registry(self) -> SchemaRegistry:
        """Schema registry."""
        return self._connections.registry

    @property
    def connections(self) -> ConnectionCache:
        """Remote connection cache."""
        return self._connections

    @property
    def contracts(self) -> ContractDiscovery:
        """Method contract discovery."""
        return self._contracts

    @property
    def current_schema(self) -> str | None:
        """Identifier of the selected schema, None when nothing is selected."""
        return self._current_schema

    @property
    def pending_invocation(self) -> PendingInvocation | None:
        """Invocation captured by the last :meth:`select_method`."""
        return self._pending

    @property
    def is_executed(self) -> bool:
        """Whether the pending invocation already has a memoized result."""
        return self._executed

    def session(self) -> SchemaGateway:
        """Create a new session sharing this gateway's caches.

        The new gateway has its own schema selection and invocation state, so
        sessions can be used concurrently from different threads.
        """
        return type(self)(
            config=self._config,
            logger=self._logger,
            connections=self._connections,
            contracts=self._contracts,
            metrics=self._metrics,
        )

    def _clear_invocation(self) -> None:
        self._pending = None
        self._clear_result()

    def _clear_result(self) -> None:
        self._raw_result = None
        self._executed = False

    def reset(self) -> SchemaGateway:
        """Forget the selected schema and any pending invocation."""
        with self._lock:
            self._current_schema = None
            self._clear_invocation()
        return self

    # ------------------------------------------------------------------
    # Call building
    # ------------------------------------------------------------------

    def select_schema(self, schema_id: str | SchemaName) -> SchemaGateway:
        """Select the schema subsequent operations target.

        A new schema starts a fresh call sequence: the pending invocation and
        its memoized result are discarded.

        Raises:
            UnknownSchemaError: If the schema is not registered
        """
        descriptor = self.registry.get_descriptor(schema_id)
        with self._lock:
            self._current_schema = descriptor.schema_id
            self._clear_invocation()
        return self

    def daily(self) -> SchemaGateway:
        """Select the daily data schema (currency and precious metal rates)."""
        return self.select_schema(SchemaName.DAILY)

    def regions(self) -> SchemaGateway:
        """Select the regional statistics schema."""
        return self.select_schema(SchemaName.REGIONS)

    def organizations(self) -> SchemaGateway:
        """Select the credit organizations schema."""
        return self.select_schema(SchemaName.ORGANIZATIONS)

    def market(self) -> SchemaGateway:
        """Select the securities market schema."""
        return self.select_schema(SchemaName.MARKET)

    def select_method(self, method_name: str, *args: Any, **kwargs: Any) -> SchemaGateway:
        """Capture a deferred invocation of ``method_name``.

        A single mapping positional argument is taken as the argument mapping.
        Other positional values are bound to the method's parameters in
        discovery order when the call executes. Keyword arguments are named
        arguments.

        Returns:
            This gateway, for chaining into a materialization call
        """
        positional: tuple[Any, ...] = args
        arguments: dict[str, Any] = {}
        if len(args) == 1 and (args[0] is None or isinstance(args[0], Mapping)):
            positional = ()
            arguments = dict(args[0] or {})
        arguments.update(kwargs)

        with self._lock:
            self._pending = PendingInvocation(
                method_name=method_name, positional=positional, arguments=arguments
            )
            self._clear_result()
        return self

    def _require_invocation(self) -> tuple[str, PendingInvocation]:
        if not self._current_schema:
            raise NoSchemaSelectedError()
        if self._pending is None:
            raise NoMethodSelectedError(self._current_schema)
        return self._current_schema, self._pending

    def _prepare_arguments(
        self, contract: MethodContract, invocation: PendingInvocation
    ) -> dict[str, Any]:
        """Validate an invocation against its contract and coerce its values.

        Raises:
            ArityMismatchError: If the argument count differs from the contract
            MissingParameterError: If a contract parameter is not supplied
            DateParseError: If a ``dateTime`` value cannot be coerced
        """
        if invocation.argument_count != len(contract):
            raise ArityMismatchError(
                invocation.method_name, contract.parameter_names, invocation.argument_count
            )

        bound = invocation.bind(contract)
        arguments: dict[str, Any] = {}
        for name, type_name in contract:
            value = bound.get(name)
            if value is None:
                raise MissingParameterError(invocation.method_name, name, type_name)
            if _is_date_time(type_name):
                value = coerce_date(
                    value,
                    timezone=self._config.dates.timezone,
                    formats=self._config.dates.input_formats,
                )
            arguments[name] = value
        return arguments

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def _log(self, level: int, message: str, **context: Any) -> None:
        log_call_event(self._logger, level, message, self._config.logging.category, **context)

    def execute(self) -> Any:
        """Execute the pending invocation once and memoize its raw result.

        Returns:
            Structured response of the remote call

        Raises:
            NoSchemaSelectedError: If no schema is selected
            NoMethodSelectedError: If no method is selected
            UnknownMethodError: If the schema has no such method
            ArityMismatchError: If the argument count differs from the contract
            MissingParameterError: If a contract parameter is not supplied
            DateParseError: If a ``dateTime`` value cannot be coerced
            ContractParseError: If the schema's type metadata is malformed
            RemoteCallError: If the remote call fails
        """
        with self._lock:
            if self._executed:
                return self._raw_result

            schema_id, invocation = self._require_invocation()
            method_name = invocation.method_name
            params = {**dict(enumerate(invocation.positional)), **invocation.arguments}
            start = time.perf_counter()
            self._log(
                logging.INFO,
                f"[START] Query method {method_name} with params: {params!r}",
                schema_id=schema_id,
                method_name=method_name,
            )

            called = False
            try:
                client = self._connections.get_client(schema_id)
                contract = self._contracts.get_contract(schema_id, method_name)
                arguments = self._prepare_arguments(contract, invocation)

                called = True
                try:
                    result = client.call(method_name, arguments)
                except CBRGatewayError:
                    raise
                except Exception as e:
                    raise RemoteCallError(
                        str(e) or type(e).__name__,
                        fault_code=type(e).__name__,
                        method_name=method_name,
                        endpoint=client.endpoint,
                    ) from e
            except CBRGatewayError as e:
                elapsed = time.perf_counter() - start
                if called:
                    self._metrics.record_call(schema_id, method_name, False, elapsed)
                frame = traceback.extract_tb(e.__traceback__)[-1] if e.__traceback__ else None
                origin = f"{frame.filename}:{frame.lineno}" if frame else "unknown"
                self._log(
                    logging.ERROR,
                    f"[ERROR] {e.message} on {origin}",
                    schema_id=schema_id,
                    method_name=method_name,
                    error_code=e.error_code,
                    fault_code=getattr(e, "fault_code", None),
                    origin=origin,
                    elapsed=elapsed,
                )
                raise

            elapsed = time.perf_counter() - start
            self._metrics.record_call(schema_id, method_name, True, elapsed)
            self._log(
                logging.INFO,
                f"[END] Request successfully ended (ex.time: {elapsed:.3f}s)",
                schema_id=schema_id,
                method_name=method_name,
                elapsed=elapsed,
            )

            self._raw_result = result
            self._executed = True
            return result

    # ------------------------------------------------------------------
    # Materialization
    # ------------------------------------------------------------------

    def as_structured(self) -> Any:
        """Get the raw structured result, executing the invocation if needed."""
        return self.execute()

    def as_xml_fragment(self) -> etree._Element:
        """Get the XML document carried by ``<method>Result``.

        Raises:
            XmlExtractionError: If the result field or its XML payload is absent
        """
        with self._lock:
            raw = self.as_structured()
            assert self._pending is not None
            method_name = self._pending.method_name
        return extract_xml_fragment(
            raw,
            method_name,
            result_suffix=self._config.results.result_suffix,
            payload_fields=self._config.results.xml_payload_fields,
        )

    def describe_method(self) -> str:
        """Render the selected method's contract as a call signature.

        Example:
            ``"GetCursOnDate(dateTime On_date)"``

        Raises:
            NoSchemaSelectedError: If no schema is selected
            NoMethodSelectedError: If no method is selected
            UnknownMethodError: If the schema has no such method
        """
        with self._lock:
            schema_id, invocation = self._require_invocation()
        return self._contracts.get_contract(schema_id, invocation.method_name).signature()

    def available_methods(self) -> list[str]:
        """Names of every method discovered in the selected schema."""
        with self._lock:
            schema_id = self._current_schema
        if not schema_id:
            raise NoSchemaSelectedError()
        return sorted(self._contracts.get_contracts(schema_id))


class CBRGateway(SchemaGateway):
    """Gateway with convenience lookups over the daily rates schema."""

    def _resolve_date(self, value: str | int | float | date | datetime | None) -> date:
        return resolve_date(
            value,
            timezone=self._config.dates.timezone,
            formats=self._config.dates.input_formats,
        )

    def list_courses(
        self, on_date: str | int | float | date | datetime | None = None
    ) -> list[CurrencyRate]:
        """Get the currency rates set for a date.

        Args:
            on_date: Date as ``d.m.Y`` string, Unix timestamp or date; today if None

        Returns:
            Every currency rate of the day

        Raises:
            EmptyResultError: If the response carries no rate list
        """
        day = self._resolve_date(on_date)
        fragment = (
            self.daily()
            .select_method(COURSES_METHOD, {COURSES_DATE_PARAMETER: day})
            .as_xml_fragment()
        )

        if etree.QName(fragment).localname == COURSES_DATA_TAG:
            data = fragment
        else:
            data = fragment.find(COURSES_DATA_TAG)
        rows = data.findall(COURSES_ROW_TAG) if data is not None else []
        if not rows:
            raise EmptyResultError(COURSES_METHOD, f"{COURSES_DATA_TAG}/{COURSES_ROW_TAG}")

        try:
            return [CurrencyRate.from_element(row) for row in rows]
        except ValidationError as e:
            raise XmlExtractionError(COURSES_METHOD, COURSES_ROW_TAG, reason=str(e)) from e

    def lookup_course_rate(
        self,
        currency_code: str,
        on_date: str | int | float | date | datetime | None = None,
    ) -> float | None:
        """Get the rate of one currency unit for a date.

        Args:
            currency_code: Alphabetic currency code (USD, EUR, ...)
            on_date: Date as ``d.m.Y`` string, Unix timestamp or date; today if None

        Returns:
            ``value / nominal`` rounded to the configured precision, or None
            if the currency is not quoted that day
        """
        code = currency_code.strip().upper()
        for rate in self.list_courses(on_date):
            if rate.char_code.upper() == code:
                return rate.unit_rate(self._config.rates.precision)

        logger.debug("Currency not quoted", extra={"currency_code": code})
        return None
