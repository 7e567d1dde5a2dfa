#!/usr/bin/env python
# -*- coding: utf-8 -*-

from mispclient import MISPClient
import argparse
import logging


def get_parser():
    parser = argparse.ArgumentParser(description='Create an event on MISP, unless it already exists, then tag it and add attributes.')
    parser.add_argument("-o", "--org", required=True, help="Organisation owning the event.")
    parser.add_argument("-i", "--info", required=True, help="Used to populate the event info field.")
    parser.add_argument("-e", "--email", help="Email of the creator of the event.")
    parser.add_argument("-d", "--distrib", type=int, default=0, help="The distribution setting of the newly created event. [0-5].")
    parser.add_argument("-p", "--publish", action='store_true', help="Publish the newly created event.")
    parser.add_argument("-t", "--tag", type=int, action='append', default=[], help="Tag ID to attach to the event, can be repeated.")
    parser.add_argument("-a", "--attribute", nargs=4, action='append', default=[],
                        metavar=('VALUE', 'TYPE', 'CATEGORY', 'COMMENT'), help="Attribute to add to the event, can be repeated.")
    parser.add_argument("-r", "--reconcile", action='store_true', help="Also add the tags and attributes if the event already exists.")
    parser.add_argument("-v", "--verbose", action='store_true', help="Print the logs.")
    return parser


if __name__ == '__main__':
    from keys import misp_url, misp_key, misp_verifycert, misp_client_cert

    args = get_parser().parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    misp = MISPClient(misp_url, misp_key, misp_verifycert, cert=misp_client_cert or None, tool='create_event.py')

    attributes = [{'value': value, 'type': type_, 'category': category, 'comment': comment}
                  for value, type_, category, comment in args.attribute]
    event_id = misp.create_event(args.email, args.tag, args.org, args.info, args.publish, args.distrib,
                                 attributes, reconcile_existing=args.reconcile)
    if event_id is None:
        print('Unable to find or create the event, see the logs.')
    else:
        print(event_id)
