"""RC beam design toolbox: host core plus ACI 318 calculation tools."""

__version__ = "1.0.0"
