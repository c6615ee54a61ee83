"""
Errors raised while planning a scenario or reducing flow statistics.

Planning errors are fatal: no partial plan is returned. A malformed flow
record only invalidates that flow, the aggregator reports it as having no
data and carries on with the rest of the record set.
"""


class ScenarioError(ValueError):
    """Scenario parameters cannot produce a usable plan"""


class InvalidFrequency(ScenarioError):
    """A band's center frequency is outside the supported range"""

    def __init__(self, band_index: int, frequency: float, minimum: float, maximum: float):
        self.band_index = band_index
        self.frequency = frequency
        self.minimum = minimum
        self.maximum = maximum
        super().__init__(
            f"Band {band_index} center frequency {frequency / 1e9:g} GHz is outside "
            f"the supported range [{minimum / 1e9:g}, {maximum / 1e9:g}] GHz"
        )


class DuplicatePort(ScenarioError):
    """Two traffic classes would be classified onto the same port"""

    def __init__(self, port: int, first: str, second: str):
        self.port = port
        self.first = first
        self.second = second
        super().__init__(
            f"Traffic classes '{first}' and '{second}' both use port {port}"
        )


class MalformedRecord(ValueError):
    """A raw flow record violates the simulator's counter semantics"""

    def __init__(self, flow_id: int, reason: str):
        self.flow_id = flow_id
        self.reason = reason
        super().__init__(f"Flow {flow_id} is malformed: {reason}")
