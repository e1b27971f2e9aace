import json, logging, sys
from humps import camelize
from os import environ
from urllib.parse import parse_qs

from genomatrix.lib.config import load_config, setup_logging
from genomatrix.lib.errors import GenomatrixError, InvalidRequest

logger = logging.getLogger(__name__)

"""
CGI plumbing for the services: request parameters come from the query string
and/or a JSON body, responses are printed as header lines followed by the
body. The caller identity is only taken from the `X-User-Id` header injected
by the gateway after token verification, never from request parameters.
"""

IDENTITY_HEADER = "HTTP_X_USER_ID"

################################################################################

def request_parameters(env=environ, stdin=None):
    stdin = stdin or sys.stdin
    params = {}
    for k, v in parse_qs(env.get("QUERY_STRING", ""), keep_blank_values=True).items():
        params.update({k: v[-1]})

    if env.get("REQUEST_METHOD", "GET").upper() == "POST":
        try:
            c_l = int(env.get("CONTENT_LENGTH") or 0)
        except ValueError:
            c_l = 0
        body = stdin.read(c_l) if c_l > 0 else ""
        if len(body.strip()) > 0:
            try:
                j_b = json.loads(body)
            except ValueError:
                raise InvalidRequest("The request body is not valid JSON.")
            if not isinstance(j_b, dict):
                raise InvalidRequest("The request body has to be a JSON object.")
            params.update(j_b)

    for k in ("callerIdentity", "caller_identity"):
        params.pop(k, None)
    if (c_i := env.get(IDENTITY_HEADER, "").strip()):
        params.update({"callerIdentity": c_i})

    return params


################################################################################

def list_parameter(params, key):
    v = params.get(key, [])
    if isinstance(v, str):
        v = v.split(",")
    return [ str(i).strip() for i in v if len(str(i).strip()) > 0 ]


################################################################################

def service_config():
    config = load_config()
    setup_logging(config)
    return config


################################################################################

def run_service(service, *args, out=None, **kwargs):
    """
    Runs a service function, answering known errors with their status and
    everything else with a generic 500 response.
    """
    try:
        service(*args, out=out, **kwargs)
    except GenomatrixError as e:
        if e.status >= 500:
            logger.error(f"{service.__name__}: {e.message}")
        print_error_response(e.status, e.response_message(), out)
    except Exception:
        logger.exception(f"{service.__name__} failed")
        print_error_response(500, "Server Error.", out)


################################################################################

def print_json_response(data, status=200, out=None, camelize_keys=True):
    if camelize_keys:
        data = camelize(data)
    print('Content-Type: application/json', file=out)
    print(f'status: {status}', file=out)
    print(file=out)
    print(json.dumps(data, indent=None, default=str), file=out)


################################################################################

def print_error_response(status, message, out=None):
    e = {"error": {"error_code": status, "error_message": message}}
    print_json_response(e, status, out)


################################################################################

def print_text_lines(lines, filename="genotypes.tsv", out=None):
    open_text_streaming(filename, out)
    for l in lines:
        print(l, file=out)


################################################################################

def open_text_streaming(filename="data.tsv", out=None):
    print('Content-Type: text/plain', file=out)
    if not "browser" in filename:
        print('Content-Disposition: attachment; filename="{}"'.format(filename), file=out)
    print('status: 200', file=out)
    print(file=out)
