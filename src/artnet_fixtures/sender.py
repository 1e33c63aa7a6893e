"""
ArtNet Sender Module

Wraps one stupidArtnet instance for the configured universe. The core writes
slot values into `values` and calls `transmit()`; framing, sequence numbers
and the keep-alive refresh are stupidArtnet's job.
"""

from stupidArtnet import StupidArtnet

from .constants import DMX_UNIVERSE_SIZE, DEFAULT_REFRESH_INTERVAL_MS
from .logger import get_logger

logger = get_logger(__name__)


def split_universe(universe: int):
    """
    Decompose a flat 15-bit Art-Net port address.

    Returns:
        (net, subnet, universe)
    """
    return (universe >> 8) & 0x7F, (universe >> 4) & 0x0F, universe & 0x0F


class ArtNetSender:
    """Single-universe Art-Net output"""

    def __init__(self, target_ip, net=0, subnet=0, universe=0,
                 refresh_interval_ms=DEFAULT_REFRESH_INTERVAL_MS):
        """
        Args:
            target_ip: Art-Net node IP
            net: Net (0-127)
            subnet: Sub-Net (0-15)
            universe: Universe inside the sub-net (0-15)
            refresh_interval_ms: Keep-alive resend interval (0 = only send on transmit)
        """
        self.target_ip = target_ip
        self.net = net
        self.subnet = subnet
        self.universe = universe
        self.refresh_interval_ms = refresh_interval_ms
        self._running = False

        fps = 1000.0 / refresh_interval_ms if refresh_interval_ms else 1
        self._artnet = StupidArtnet(
            target_ip=target_ip,
            universe=universe,
            packet_size=DMX_UNIVERSE_SIZE,
            fps=fps,
            even_packet_size=True,
            broadcast=False
        )
        # Address by net/subnet/universe instead of the flat port address
        self._artnet.set_simplified(False)
        self._artnet.set_net(net)
        self._artnet.set_subnet(subnet)
        self._artnet.set_universe(universe)

        if refresh_interval_ms:
            self._artnet.start()
            self._running = True

        logger.debug(f"ArtNet sender created: {target_ip} (Net:{net}, Sub:{subnet}, Uni:{universe}, "
                     f"refresh {refresh_interval_ms}ms)")

    @classmethod
    def for_universe(cls, target_ip, universe, refresh_interval_ms=DEFAULT_REFRESH_INTERVAL_MS):
        """Create a sender from a flat 0-32767 universe number."""
        net, subnet, uni = split_universe(universe)
        return cls(target_ip, net=net, subnet=subnet, universe=uni,
                   refresh_interval_ms=refresh_interval_ms)

    @property
    def values(self):
        """Live slot buffer sent on every transmit/refresh"""
        return self._artnet.buffer

    def transmit(self):
        """Send the current buffer immediately."""
        self._artnet.show()

    def stop(self):
        """Stop the refresh thread and close the socket."""
        if self._running:
            self._artnet.stop()
            self._running = False
        try:
            self._artnet.close()
        except OSError as e:
            logger.warning(f"Error closing Art-Net socket: {e}")
        logger.debug(f"ArtNet sender stopped: {self.target_ip}")
