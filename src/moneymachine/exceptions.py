class MoneyMachineError(Exception):
    """Base error for controller operations"""


class UnknownNodeError(MoneyMachineError, KeyError):
    def __init__(self, node_id):
        super().__init__(node_id)
        self.node_id = node_id

    def __str__(self):
        return f"Unknown node: {self.node_id}"


class UnknownSignalError(MoneyMachineError, KeyError):
    def __init__(self, signal_id):
        super().__init__(signal_id)
        self.signal_id = signal_id

    def __str__(self):
        return f"Unknown signal: {self.signal_id}"
