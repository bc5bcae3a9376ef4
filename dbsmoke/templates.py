"""Template written by ``dbsmoke init``."""

CONFIG_TEMPLATE = """\
# dbsmoke configuration
#
# Every setting is optional. DBSMOKE_* environment variables
# (DBSMOKE_IMAGE, DBSMOKE_HOST_PORT, ...) take precedence over this file.

vars:
  tag: latest

harness:
  image: mariadb-alpine:${tag}
  container_name: mariadb_alpine_test
  host: 127.0.0.1
  host_port: 33060
  container_port: 3306
  env_file: /tmp/mariadb_alpine_test_env
  # volume_root: /tmp

  # Readiness poll: attempts x interval seconds
  ready_attempts: 31
  ready_interval: 1.0

  # Pause after the daemon starts before probing a refused root host
  settle_seconds: 3.0

  query_timeout: 10
  mysql_binary: mysql
"""
