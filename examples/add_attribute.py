#!/usr/bin/env python
# -*- coding: utf-8 -*-

from mispclient import MISPClient, MISPAttribute
import argparse
import json


def get_parser():
    parser = argparse.ArgumentParser(description='Add an attribute to an event.')
    parser.add_argument("-e", "--event", required=True, help="Event ID to update.")
    parser.add_argument("-t", "--type", required=True, help="Type of the attribute (ip-dst, domain, md5...).")
    parser.add_argument("-v", "--value", required=True, help="Value of the attribute.")
    parser.add_argument("-c", "--category", help="Category of the attribute, the server picks the default of the type if not set.")
    parser.add_argument("--comment", default='', help="Comment of the attribute.")
    return parser


if __name__ == '__main__':
    from keys import misp_url, misp_key, misp_verifycert, misp_client_cert

    args = get_parser().parse_args()

    misp = MISPClient(misp_url, misp_key, misp_verifycert, cert=misp_client_cert or None)

    result = misp.add_event_attribute(args.event, MISPAttribute(args.value, args.type, args.category, args.comment))
    if result.is_duplicate:
        print('The event already has this attribute.')
    else:
        print(json.dumps(result.value))
