import logging, requests, time

from genomatrix.lib.errors import Forbidden, InvalidRequest, NotFound, Unauthorized, UpstreamUnavailable

logger = logging.getLogger(__name__)

"""
Narrow clients for the Feature and List services. Every call is made with
the configured timeout; connection failures, timeouts and gateway errors
(502, 503, 504) are retried `retries` times before surfacing as
`UpstreamUnavailable`. Definite answers (404, 403, 401) map to the
corresponding errors and are never retried.
"""

RETRY_STATUS = (502, 503, 504)

################################################################################

class CollaboratorClient:

    def __init__(self, base_url, timeout_seconds=10, retries=1, retry_backoff_seconds=0.2, session=None):
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.retries = retries
        self.retry_backoff_seconds = retry_backoff_seconds
        self.session = session or requests.Session()
        self.service_label = self.__class__.__name__


    # -------------------------------------------------------------------------#

    def request(self, method, path, params=None, json=None, headers=None):
        url = f'{self.base_url}/{path.lstrip("/")}'
        for attempt in range(self.retries + 1):
            try:
                r = self.session.request(
                    method, url,
                    params=params,
                    json=json,
                    headers=headers,
                    timeout=self.timeout_seconds
                )
            except (requests.ConnectionError, requests.Timeout) as e:
                logger.warning(f"{self.service_label} {method} {url} failed (attempt {attempt + 1}): {e}")
                if attempt < self.retries:
                    time.sleep(self.retry_backoff_seconds)
                    continue
                raise UpstreamUnavailable(f"{self.service_label} could not be reached.")
            except requests.RequestException as e:
                logger.warning(f"{self.service_label} {method} {url} failed: {e}")
                raise UpstreamUnavailable(f"{self.service_label} request failed.")

            if r.status_code in RETRY_STATUS and attempt < self.retries:
                logger.warning(f"{self.service_label} {method} {url} returned {r.status_code}, retrying")
                time.sleep(self.retry_backoff_seconds)
                continue

            return r


    # -------------------------------------------------------------------------#

    def json_payload(self, r, not_found_message):
        if r.status_code == 404:
            raise NotFound(not_found_message)
        if r.status_code == 401:
            raise Unauthorized("Access Denied: the caller identity was not accepted.")
        if r.status_code == 403:
            raise Forbidden("Access Denied: the saved list belongs to another user.")
        if r.status_code == 400:
            raise InvalidRequest(f"{self.service_label} rejected the request.")
        if not r.ok:
            raise UpstreamUnavailable(f"{self.service_label} returned status {r.status_code}.")
        try:
            return r.json()
        except ValueError:
            raise UpstreamUnavailable(f"{self.service_label} returned an unreadable response.")


################################################################################
################################################################################
################################################################################

class FeatureClient(CollaboratorClient):

    def coordinates(self, locus_id, reference_genome):
        """Returns `{"contig", "start", "end"}` for a locus."""
        r = self.request(
            "GET",
            f"features/coordinates/{locus_id}",
            params={"referenceGenome": reference_genome}
        )
        d = self.json_payload(r, f"Locus '{locus_id}' not found for {reference_genome}.")
        coords = _coordinates(d)
        if coords is None:
            raise NotFound(f"No coordinates for locus '{locus_id}' in {reference_genome}.")
        return coords


    # -------------------------------------------------------------------------#

    def batch_coordinates(self, locus_ids, reference_genome):
        """
        Returns `(success, failed)`, where `success` is a list of
        `{"id", "contig", "start", "end"}` and `failed` a list of locus ids.
        """
        r = self.request(
            "POST",
            "features/coordinates/batch",
            json={"locusIds": list(locus_ids), "referenceGenome": reference_genome}
        )
        d = self.json_payload(r, f"No loci found for {reference_genome}.")
        success = []
        failed = list(d.get("failed", []))
        for s in d.get("success", []):
            coords = _coordinates(s)
            if coords is None:
                failed.append(s.get("id"))
                continue
            coords.update({"id": s.get("id")})
            success.append(coords)
        return success, failed


    # -------------------------------------------------------------------------#

    def lookup_names(self, locus_ids):
        r = self.request("GET", "features/lookup", params={"ids": ",".join(locus_ids)})
        d = self.json_payload(r, "No loci found.")
        names = {}
        for l in d if isinstance(d, list) else []:
            l_id = l.get("_id", l.get("id"))
            if l_id and l.get("geneName"):
                names.update({str(l_id): l["geneName"]})
        return names


################################################################################
################################################################################
################################################################################

class ListClient(CollaboratorClient):

    def list_content(self, list_id, caller_identity):
        r = self.request(
            "GET",
            f"lists/{list_id}/content",
            headers={"X-User-Id": caller_identity}
        )
        d = self.json_payload(r, f"Saved list '{list_id}' not found.")
        if isinstance(d, dict):
            d = d.get("content", [])
        if not isinstance(d, list):
            raise UpstreamUnavailable(f"{self.service_label} returned an unreadable list.")

        return [ str(i).strip() for i in d if len(str(i).strip()) > 0 ]


################################################################################

def collaborator_clients(config):
    c_p = {
        "timeout_seconds": config.timeout_seconds,
        "retries": config.retries,
        "retry_backoff_seconds": config.retry_backoff_seconds
    }
    return FeatureClient(config.feature_url, **c_p), ListClient(config.list_url, **c_p)


################################################################################

def _coordinates(d):
    if not isinstance(d, dict):
        return None
    contig = d.get("contig")
    try:
        start = int(d.get("start"))
        end = int(d.get("end"))
    except (TypeError, ValueError):
        return None
    if not contig:
        return None
    return {"contig": str(contig), "start": start, "end": end}
