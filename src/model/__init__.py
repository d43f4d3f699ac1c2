"""Model components: network data structures, text format, and instance generator"""

from .errors import ErrorKind, NetworkError, StructuralError, NetworkFormatError
from .network import Network, House, Generator, Consumption, UNASSIGNED
from .result import CostSnapshot
from .network_io import parse_network, load_network, format_network, save_network
from .instance_generator import generate_network, generate_instance_set

__all__ = ['ErrorKind', 'NetworkError', 'StructuralError', 'NetworkFormatError',
           'Network', 'House', 'Generator', 'Consumption', 'UNASSIGNED',
           'CostSnapshot', 'parse_network', 'load_network', 'format_network',
           'save_network', 'generate_network', 'generate_instance_set']
