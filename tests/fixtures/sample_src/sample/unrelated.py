def lazy_prop(name):
    def decorate(function):
        return function

    return decorate


def extensible(cls):
    return cls


@extensible
class Impostor:
    @lazy_prop("Value")
    def get_value(self) -> int:
        return 1
