from bisect import bisect_right

from slots_core.exceptions import InvalidConfigException


class WeightedSymbolPicker:
    """
    Draws symbols in proportion to their reel weights.

    The cumulative table is built once, in list order; each draw scales a
    uniform value by the total weight and takes the first prefix sum that is
    strictly greater than it.
    """

    def __init__(self, symbol_weights, random_source):
        if not symbol_weights:
            raise InvalidConfigException("Cannot build a symbol picker without symbols.")

        self._random_source = random_source
        self._symbols = []
        self._cumulative = []
        running = 0
        for entry in symbol_weights:
            if entry.weight <= 0:
                raise InvalidConfigException(
                    f"Weight for {entry.symbol.value} must be positive.",
                    details={'symbol': entry.symbol.value, 'weight': entry.weight})
            running += entry.weight
            self._symbols.append(entry.symbol)
            self._cumulative.append(running)
        self.total_weight = running

    @property
    def symbols(self):
        return list(self._symbols)

    def pick(self):
        r = self._random_source.next() * self.total_weight
        index = bisect_right(self._cumulative, r)
        if index >= len(self._symbols):
            # r landed on the upper boundary through float rounding.
            return self._symbols[-1]
        return self._symbols[index]
