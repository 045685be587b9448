import os


def _env_flag(name: str, default: bool = False) -> bool:
	value = os.getenv(name)
	if value is None:
		return default
	return value.strip().lower() in {'1', 'true', 'yes', 'on'}


class Config:
	"""
	conflux library settings.
	All settings can be overridden via environment variables.

	Environment Variables:
	----------------------
	CONFLUX_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL). Default: INFO
	CONFLUX_LOG_JSON: Render log lines as JSON when set to 1/true/yes/on. Default: off
	CONSUL_HTTP_ADDR: Address of the Consul agent. Default: http://127.0.0.1:8500
	CONSUL_HTTP_TOKEN: ACL token sent to Consul. Default: unset
	CONSUL_HTTP_TIMEOUT: Timeout in seconds for Consul requests. Default: 10
	"""
	LOG_LEVEL = os.getenv('CONFLUX_LOG_LEVEL', 'INFO').upper()
	LOG_JSON = _env_flag('CONFLUX_LOG_JSON')

	CONSUL_HTTP_ADDR = os.getenv('CONSUL_HTTP_ADDR', 'http://127.0.0.1:8500')
	CONSUL_HTTP_TOKEN = os.getenv('CONSUL_HTTP_TOKEN')
	CONSUL_HTTP_TIMEOUT = float(os.getenv('CONSUL_HTTP_TIMEOUT', '10'))
